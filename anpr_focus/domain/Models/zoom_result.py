# anpr_focus/domain/Models/zoom_result.py
from dataclasses import dataclass

import numpy as np

from anpr_focus.domain.Models.rect import Rect


@dataclass(frozen=True, eq=False)
class ZoomResult:
    """
    Resultado de una búsqueda ROI exitosa sobre un frame.
    """
    text: str            # texto ya sanitizado
    image: np.ndarray    # recorte normalizado (enderezado)
    rect: Rect           # ROI global (coordenadas del frame)
    frame_width: int
    frame_height: int

    @property
    def area(self) -> int:
        return self.rect.area
