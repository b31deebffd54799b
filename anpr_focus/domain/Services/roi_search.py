# anpr_focus/domain/Services/roi_search.py
from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

import numpy as np

from anpr_focus.core.config import settings
from anpr_focus.domain.Interfaces.text_detector import ITextDetector
from anpr_focus.domain.Interfaces.text_normalizer import ITextNormalizer
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextLine
from anpr_focus.domain.Models.zoom_result import ZoomResult
from anpr_focus.domain.Services.geometry import (
    centered_rect,
    clamp_to_bounds,
    expand_horizontally,
    trim_vertically,
)
from anpr_focus.domain.Services.line_normalizer import deskew_line
from anpr_focus.infrastructure.Imaging.image_ops import crop, image_size

logger = logging.getLogger(__name__)


class RoiNarrowingSearch:
    """
    Búsqueda iterativa de una única línea de texto dentro de un frame.

    Recorta el frame, vuelve a llamar al detector sobre el recorte y va
    estrechando la ROI hasta quedarse con una sola línea de longitud válida.
    - Arranca desde la ROI exitosa del frame anterior (continuidad temporal)
      o desde un rectángulo centrado.
    - 0 líneas, o varias líneas: recorte vertical y reintento.
    - 1 línea con longitud fuera de rango: la caja expandida pasa a ser la ROI.
    - Presupuesto de pasos acotado (settings.max_zoom_steps).
    """

    def __init__(
        self,
        detector: ITextDetector,
        normalizer: ITextNormalizer,
        max_steps: Optional[int] = None,
        initial_fraction: Optional[float] = None,
        min_crop_size: Optional[int] = None,
        trim_factor: Optional[float] = None,
        min_plate_aspect: Optional[float] = None,
        expansion_factor: Optional[float] = None,
    ):
        self.detector = detector
        self.normalizer = normalizer
        self.max_steps = max_steps if max_steps is not None else settings.max_zoom_steps
        self.initial_fraction = initial_fraction if initial_fraction is not None else settings.initial_focus_fraction
        self.min_crop_size = min_crop_size if min_crop_size is not None else settings.min_crop_size
        self.trim_factor = trim_factor if trim_factor is not None else settings.vertical_trim_factor
        self.min_plate_aspect = min_plate_aspect if min_plate_aspect is not None else settings.min_plate_aspect
        self.expansion_factor = (
            expansion_factor if expansion_factor is not None else settings.horizontal_expansion_factor
        )

        # ROI recordada entre frames
        self._lock = threading.Lock()
        self._active_rect: Optional[Rect] = None
        self.last_steps = 0

    # ---------------------------------------------------------
    #  ROI memory
    # ---------------------------------------------------------
    @property
    def active_rect(self) -> Optional[Rect]:
        with self._lock:
            return self._active_rect

    def _remember(self, rect: Optional[Rect]) -> None:
        with self._lock:
            self._active_rect = rect

    def reset(self) -> None:
        self._remember(None)

    # ---------------------------------------------------------
    #  API PRINCIPAL
    # ---------------------------------------------------------
    def search(self, source: np.ndarray) -> Optional[ZoomResult]:
        """
        Devuelve un ZoomResult o None si este frame no converge.
        En caso de None la ROI recordada se limpia.
        """
        result = self._search(source)
        self._remember(result.rect if result is not None else None)
        return result

    def _search(self, source: np.ndarray) -> Optional[ZoomResult]:
        frame_w, frame_h = image_size(source)
        if frame_w <= 0 or frame_h <= 0:
            return None

        remembered = self.active_rect
        current = (
            clamp_to_bounds(remembered, frame_w, frame_h)
            if remembered is not None
            else centered_rect(frame_w, frame_h, self.initial_fraction, self.min_crop_size)
        )

        self.last_steps = 0
        for step in range(self.max_steps):
            self.last_steps = step + 1

            region = crop(source, current)
            if region is None:
                return None

            try:
                detection = self.detector.detect(region)
            except Exception:
                logger.exception("Detector falló durante la búsqueda ROI")
                return None

            lines = self._sanitized_lines(detection.lines if detection is not None else [])

            if len(lines) != 1:
                # sin texto útil, o demasiado grueso para una sola hipótesis
                logger.debug("[ROI] paso=%d lineas=%d -> recorte vertical", step, len(lines))
                trimmed = trim_vertically(current, frame_h, self.trim_factor, self.min_crop_size)
                if trimmed is None:
                    return None
                current = trimmed
                self._remember(trimmed)
                continue

            line, sanitized = max(lines, key=lambda pair: self._box_height(pair[0]))
            region_h, region_w = region.shape[:2]
            local_box = line.bounding_box or Rect(0, 0, region_w, region_h)
            expanded = expand_horizontally(
                local_box,
                region_w,
                self.min_plate_aspect,
                self.expansion_factor,
            )
            global_rect = clamp_to_bounds(
                expanded.offset(current.left, current.top),
                frame_w,
                frame_h,
            )

            if self.normalizer.is_valid_length(sanitized):
                image = deskew_line(region, line)
                logger.debug("[ROI] convergió en paso=%d texto=%s rect=%s", step, sanitized, global_rect)
                return ZoomResult(sanitized, image, global_rect, frame_w, frame_h)

            # posición plausible pero longitud no: seguir afinando
            current = global_rect
            self._remember(global_rect)

        return None

    # ---------------------------------------------------------
    #  HELPERS
    # ---------------------------------------------------------
    def _sanitized_lines(self, lines: List[TextLine]) -> List[Tuple[TextLine, str]]:
        pairs = []
        for line in lines:
            sanitized = self.normalizer.sanitize(line.text)
            if sanitized.strip():
                pairs.append((line, sanitized))
        return pairs

    @staticmethod
    def _box_height(line: TextLine) -> int:
        return line.bounding_box.height if line.bounding_box is not None else 0
