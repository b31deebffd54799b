# anpr_focus/infrastructure/Normalizer/plate_normalizer.py
import re
from typing import Optional
from anpr_focus.domain.Interfaces.text_normalizer import ITextNormalizer
from anpr_focus.core.config import settings


class PlateNormalizer(ITextNormalizer):
    """
    Normaliza texto de placas:
    - Mayúsculas
    - Aceptar solo A-Z0-9 (sanitize, idempotente)
    - normalize() además rechaza si queda fuera de [min_len, max_len]
    """
    _ALNUM = re.compile(r"[^A-Z0-9]")

    def __init__(self, min_len: Optional[int] = None, max_len: Optional[int] = None):
        self.min_len = min_len or getattr(settings, "plate_min_length", 5)
        self.max_len = max_len or getattr(settings, "plate_max_length", 7)

    def sanitize(self, text: Optional[str]) -> str:
        if not text:
            return ""
        return self._ALNUM.sub("", text.upper())

    def is_valid_length(self, text: str) -> bool:
        return self.min_len <= len(text) <= self.max_len

    def normalize(self, text: Optional[str]) -> str:
        t = self.sanitize(text)

        # validar longitudes
        if not self.is_valid_length(t):
            return ""

        return t
