# anpr_focus/domain/Services/plate_filter.py
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from anpr_focus.core.config import settings
from anpr_focus.domain.Interfaces.text_normalizer import ITextNormalizer
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextDetection

logger = logging.getLogger(__name__)


US_STATE_NAMES = (
    "ALABAMA", "ALASKA", "ARIZONA", "ARKANSAS", "CALIFORNIA", "COLORADO",
    "CONNECTICUT", "DELAWARE", "FLORIDA", "GEORGIA", "HAWAII", "IDAHO",
    "ILLINOIS", "INDIANA", "IOWA", "KANSAS", "KENTUCKY", "LOUISIANA", "MAINE",
    "MARYLAND", "MASSACHUSETTS", "MICHIGAN", "MINNESOTA", "MISSISSIPPI",
    "MISSOURI", "MONTANA", "NEBRASKA", "NEVADA", "NEW HAMPSHIRE", "NEW JERSEY",
    "NEW MEXICO", "NEW YORK", "NORTH CAROLINA", "NORTH DAKOTA", "OHIO",
    "OKLAHOMA", "OREGON", "PENNSYLVANIA", "RHODE ISLAND", "SOUTH CAROLINA",
    "SOUTH DAKOTA", "TENNESSEE", "TEXAS", "UTAH", "VERMONT", "VIRGINIA",
    "WASHINGTON", "WEST VIRGINIA", "WISCONSIN", "WYOMING",
)

# Selección por franjas
_PRIORITY_MIN_LEN = 4
_PRIORITY_MAX_LEN = 7
_BAND_TOP = 1.0 / 3.0
_BAND_BOTTOM = 2.0 / 3.0
_BAND_MIN_HEIGHT = 0.05
_BAND_SHRINK_STEP = 0.05
_BAND_MAX_ITERATIONS = 20


@dataclass(frozen=True)
class NormalizedWindow:
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


@dataclass(frozen=True)
class _Candidate:
    text: str
    rect: Rect


def compute_center_distance(rect: Rect, frame_width: int, frame_height: int) -> float:
    """Distancia normalizada del centro de la caja al centro del frame (0 .. ~0.71)."""
    cx = rect.center_x / frame_width
    cy = rect.center_y / frame_height
    return math.hypot(cx - 0.5, cy - 0.5)


class PlateFilter:
    """
    Filtro por frame completo:
    - filter_visible_text: sólo las líneas dentro de la ventana visible
      configurada (mapeada de pantalla a frame).
    - compute_algorithm_result: el mejor candidato a placa del frame
      (pasada prioritaria + consenso por franja horizontal).
    """

    def __init__(
        self,
        normalizer: ITextNormalizer,
        min_vertical_fraction: Optional[float] = None,
        min_horizontal_fraction: Optional[float] = None,
        noise_words: Optional[Iterable[str]] = None,
    ):
        self.normalizer = normalizer
        self.min_vertical_fraction = (
            min_vertical_fraction if min_vertical_fraction is not None else settings.min_vertical_fraction
        )
        self.min_horizontal_fraction = (
            min_horizontal_fraction if min_horizontal_fraction is not None else settings.min_horizontal_fraction
        )
        words = noise_words if noise_words is not None else US_STATE_NAMES
        self.noise_words: FrozenSet[str] = frozenset(normalizer.sanitize(w) for w in words)

        self._lock = threading.Lock()
        self._vertical_fraction = 1.0
        self._horizontal_fraction = 1.0
        self._preview_width = 0
        self._preview_height = 0

    # ---------------------------------------------------------
    #  CONFIGURACIÓN DE VENTANA
    # ---------------------------------------------------------
    @property
    def vertical_fraction(self) -> float:
        return self._vertical_fraction

    @property
    def horizontal_fraction(self) -> float:
        return self._horizontal_fraction

    def update_vertical_fraction(self, fraction: float) -> None:
        with self._lock:
            self._vertical_fraction = min(max(fraction, self.min_vertical_fraction), 1.0)

    def update_horizontal_fraction(self, fraction: float) -> None:
        with self._lock:
            self._horizontal_fraction = min(max(fraction, self.min_horizontal_fraction), 1.0)

    def update_preview_size(self, width: int, height: int) -> None:
        with self._lock:
            self._preview_width = width
            self._preview_height = height

    # ---------------------------------------------------------
    #  VENTANA VISIBLE
    # ---------------------------------------------------------
    def filter_visible_text(self, result: TextDetection, image_width: int, image_height: int) -> Optional[str]:
        if image_width <= 0 or image_height <= 0:
            return result.text if result.text and result.text.strip() else None

        window = self.compute_image_window(image_width, image_height)
        in_window: List[str] = []
        for line in result.lines:
            box = line.bounding_box
            if box is None:
                continue
            cx = box.center_x / image_width
            cy = box.center_y / image_height
            if window.contains(cx, cy):
                content = line.text.strip()
                if content:
                    in_window.append(content)

        if not in_window:
            return None
        return "\n".join(in_window)

    def compute_image_window(self, image_width: int, image_height: int) -> NormalizedWindow:
        """
        Ventana visible en fracciones [0, 1] del frame.

        La vista previa escala el frame "para llenar" (center crop), así que la
        ventana de pantalla se traslada por el recorte y se divide por la escala.
        """
        with self._lock:
            vertical = self._vertical_fraction
            horizontal = self._horizontal_fraction
            view_w = self._preview_width
            view_h = self._preview_height

        top = (1.0 - vertical) / 2.0
        bottom = 1.0 - top
        left = (1.0 - horizontal) / 2.0
        right = 1.0 - left

        if view_w <= 0 or view_h <= 0 or image_width <= 0 or image_height <= 0:
            return NormalizedWindow(left, top, right, bottom)

        scale = max(view_w / image_width, view_h / image_height)
        crop_x = (image_width * scale - view_w) / 2.0
        crop_y = (image_height * scale - view_h) / 2.0

        def horizontal_to_image(fraction: float) -> float:
            px = (fraction * view_w + crop_x) / scale
            return min(max(px / image_width, 0.0), 1.0)

        def vertical_to_image(fraction: float) -> float:
            px = (fraction * view_h + crop_y) / scale
            return min(max(px / image_height, 0.0), 1.0)

        return NormalizedWindow(
            horizontal_to_image(left),
            vertical_to_image(top),
            horizontal_to_image(right),
            vertical_to_image(bottom),
        )

    # ---------------------------------------------------------
    #  SELECCIÓN DE CANDIDATO
    # ---------------------------------------------------------
    def compute_algorithm_result(self, result: TextDetection, image_width: int, image_height: int) -> Optional[str]:
        if image_width <= 0 or image_height <= 0:
            return result.text if result.text and result.text.strip() else None

        candidates = [
            _Candidate(line.text.strip(), line.bounding_box)
            for line in result.lines
            if line.bounding_box is not None and line.text.strip()
        ]
        if not candidates:
            return None

        # 1) pasada prioritaria: longitud de placa y fuera del diccionario de ruido
        prioritized = [c for c in candidates if self._is_priority_candidate(c.text)]
        if prioritized:
            best = min(prioritized, key=lambda c: compute_center_distance(c.rect, image_width, image_height))
            return best.text

        # 2) consenso por franja horizontal que se va estrechando
        top = _BAND_TOP
        bottom = _BAND_BOTTOM
        for iteration in range(_BAND_MAX_ITERATIONS):
            in_band = [c for c in candidates if top <= c.rect.center_y / image_height <= bottom]
            unique = list(dict.fromkeys(c.text for c in in_band))
            if len(unique) == 1:
                return unique[0]
            if not unique and iteration == 0:
                return candidates[0].text
            if bottom - top <= _BAND_MIN_HEIGHT:
                return unique[0] if unique else candidates[0].text
            top += _BAND_SHRINK_STEP / 2.0
            bottom -= _BAND_SHRINK_STEP / 2.0
            if top >= bottom:
                return unique[0] if unique else candidates[0].text

        return candidates[0].text

    def _is_priority_candidate(self, text: str) -> bool:
        sanitized = self.normalizer.sanitize(text)
        return (
            _PRIORITY_MIN_LEN <= len(sanitized) <= _PRIORITY_MAX_LEN
            and sanitized not in self.noise_words
        )
