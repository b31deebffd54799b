import logging
from typing import List

import easyocr
import numpy as np

from anpr_focus.domain.Interfaces.text_detector import ITextDetector
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextDetection, TextLine
from anpr_focus.core.config import settings

logger = logging.getLogger(__name__)


class EasyOCRTextDetector(ITextDetector):
    """
    Detector de texto usando EasyOCR.
    - Cada resultado de readtext() es una línea: 4 esquinas + texto + confianza.
    - Las esquinas vienen en sentido horario desde arriba-izquierda, así que
      las dos primeras marcan la inclinación del borde superior.
    """

    def __init__(
        self,
        lang: str | None = None,
        gpu: bool | None = None,
        min_confidence: float = 0.0,
        reader=None,
    ):
        self.reader = reader or easyocr.Reader(
            [lang or settings.ocr_lang],
            gpu=settings.ocr_gpu if gpu is None else gpu,
        )
        self.min_confidence = min_confidence

    def detect(self, image: np.ndarray) -> TextDetection:
        if image is None or image.size == 0:
            return TextDetection()

        results = self.reader.readtext(image)

        lines: List[TextLine] = []
        for points, text, confidence in results:
            if confidence < self.min_confidence:
                continue
            corners = tuple((float(x), float(y)) for x, y in points)
            lines.append(TextLine(
                text=text,
                bounding_box=Rect.from_points(corners),
                corner_points=corners,
            ))

        logger.debug("[EasyOCR] %d líneas detectadas", len(lines))
        return TextDetection.from_lines(lines)
