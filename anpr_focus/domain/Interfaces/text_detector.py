from abc import ABC, abstractmethod

import numpy as np

from anpr_focus.domain.Models.text_line import TextDetection


class ITextDetector(ABC):
    """
    Servicio externo de detección de texto (OCR).
    """
    @abstractmethod
    def detect(self, image: np.ndarray) -> TextDetection:
        """
        Detecta líneas de texto en la imagen (frame completo o recorte).
        Es bloqueante; puede lanzar excepción si el servicio falla.
        """
        pass
