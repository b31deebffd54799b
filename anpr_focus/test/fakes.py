import threading
from typing import List, Optional

import numpy as np

from anpr_focus.domain.Interfaces.text_detector import ITextDetector
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Models.text_line import TextDetection, TextLine


class ScriptedTextDetector(ITextDetector):
    """
    Detector falso: cada llamada consume la siguiente respuesta del guion
    (la última se repite). Guarda el tamaño de cada imagen recibida.
    """

    def __init__(self, responses: List[Optional[List[TextLine]]]):
        self.responses = list(responses)
        self.calls = 0
        self.shapes = []

    def detect(self, image: np.ndarray) -> TextDetection:
        self.shapes.append(image.shape)
        index = min(self.calls, len(self.responses) - 1)
        self.calls += 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return TextDetection.from_lines(response or [])


class FailingTextDetector(ITextDetector):
    def __init__(self):
        self.calls = 0

    def detect(self, image: np.ndarray) -> TextDetection:
        self.calls += 1
        raise RuntimeError("servicio OCR caído")


class GatedTextDetector(ITextDetector):
    """Bloquea detect() hasta que se abre la compuerta."""

    def __init__(self, inner: ITextDetector):
        self.inner = inner
        self.entered = threading.Event()
        self.gate = threading.Event()

    def detect(self, image: np.ndarray) -> TextDetection:
        self.entered.set()
        self.gate.wait(timeout=5)
        return self.inner.detect(image)


def line(text: str, left: int, top: int, right: int, bottom: int, corners=()) -> TextLine:
    return TextLine(text, Rect(left, top, right, bottom), tuple(corners))
