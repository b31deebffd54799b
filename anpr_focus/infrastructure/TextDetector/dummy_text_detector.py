from typing import List, Optional

import numpy as np

from anpr_focus.domain.Interfaces.text_detector import ITextDetector
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextDetection, TextLine


class DummyTextDetector(ITextDetector):
    """
    Implementación dummy: devuelve siempre la misma línea centrada en la
    imagen recibida, para probar el pipeline sin modelo OCR.
    """

    def __init__(self, text: str = "FAKE123", lines: Optional[List[TextLine]] = None):
        self.text = text
        self.lines = lines

    def detect(self, image: np.ndarray) -> TextDetection:
        if self.lines is not None:
            return TextDetection.from_lines(self.lines)

        h, w = image.shape[:2]
        box_w = max(w // 2, 1)
        box_h = max(h // 6, 1)
        left = (w - box_w) // 2
        top = (h - box_h) // 2
        box = Rect(left, top, left + box_w, top + box_h)
        corners = (
            (float(box.left), float(box.top)),
            (float(box.right), float(box.top)),
            (float(box.right), float(box.bottom)),
            (float(box.left), float(box.bottom)),
        )
        return TextDetection.from_lines([TextLine(self.text, box, corners)])
