from typing import Tuple

from anpr_focus.core.config import settings


class StaticDisplayGeometry:
    """
    Tamaño de vista previa fijo (desde settings).
    (0, 0) = sin vista previa: el filtro usa las fracciones tal cual.
    """

    def __init__(self, width: int | None = None, height: int | None = None):
        self.width = settings.preview_width if width is None else width
        self.height = settings.preview_height if height is None else height

    def preview_size(self) -> Tuple[int, int]:
        return self.width, self.height
