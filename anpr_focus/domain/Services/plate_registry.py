# anpr_focus/domain/Services/plate_registry.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

import numpy as np

from anpr_focus.core.config import settings
from anpr_focus.domain.Models.plate import PlateEntry
from anpr_focus.utils.image_similarity import image_similarity

logger = logging.getLogger(__name__)


class PlateRegistry:
    """
    Registro de placas confirmadas durante la sesión.

    - Sólo entran textos confirmados por el operador (los votos no bastan).
    - Una entrada por texto con su mejor captura y su área.
    - Reemplazo: área estrictamente mayor, o captura muy parecida
      (similitud > umbral) para refrescar la imagen.
    - remove() borra entrada y confirmación a la vez.
    """

    def __init__(
        self,
        similarity_threshold: Optional[float] = None,
        sample_size: Optional[int] = None,
        similarity: Callable[[np.ndarray, np.ndarray, int], float] = image_similarity,
    ):
        self.similarity_threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else settings.image_similarity_threshold
        )
        self.sample_size = sample_size if sample_size is not None else settings.similarity_sample_size
        self._similarity = similarity

        self._lock = threading.RLock()
        self._entries: Dict[str, PlateEntry] = {}
        self._confirmed: set[str] = set()

    # ---------------------------------------------------------
    #  CONFIRMACIÓN
    # ---------------------------------------------------------
    def confirm(self, text: str) -> None:
        with self._lock:
            self._confirmed.add(text)

    def is_confirmed(self, text: str) -> bool:
        with self._lock:
            return text in self._confirmed

    # ---------------------------------------------------------
    #  API PRINCIPAL
    # ---------------------------------------------------------
    def insert_or_update(self, text: str, area: int, image: np.ndarray) -> bool:
        """Devuelve True si el registro cambió."""
        with self._lock:
            if text not in self._confirmed:
                return False

            existing = self._entries.get(text)
            if existing is not None and not self._should_replace(existing, area, image):
                return False

            self._entries[text] = PlateEntry(image=image, area=area)
            logger.debug("Registro actualizado: %s (area=%d)", text, area)
            return True

    def remove(self, text: str) -> bool:
        with self._lock:
            removed = self._entries.pop(text, None) is not None
            confirmed = text in self._confirmed
            self._confirmed.discard(text)
            return removed or confirmed

    def get(self, text: str) -> Optional[PlateEntry]:
        with self._lock:
            return self._entries.get(text)

    def snapshot(self) -> Dict[str, PlateEntry]:
        with self._lock:
            return dict(self._entries)

    def confirmed(self) -> set[str]:
        with self._lock:
            return set(self._confirmed)

    def export_list(self) -> str:
        """Placas ordenadas, una por línea (para compartir)."""
        with self._lock:
            return "\n".join(sorted(self._entries))

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ---------------------------------------------------------
    #  HELPERS
    # ---------------------------------------------------------
    def _should_replace(self, existing: PlateEntry, area: int, image: np.ndarray) -> bool:
        if area > existing.area:
            return True
        return self._similarity(existing.image, image, self.sample_size) > self.similarity_threshold
