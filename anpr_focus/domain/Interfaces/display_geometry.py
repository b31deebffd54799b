from typing import Protocol, Tuple

class IDisplayGeometry(Protocol):
    """
    Tamaño actual de la vista previa en pantalla.
    (0, 0) significa desconocido: el filtro usa las fracciones sin mapear.
    """
    def preview_size(self) -> Tuple[int, int]: ...
