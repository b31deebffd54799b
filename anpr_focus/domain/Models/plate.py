from dataclasses import dataclass
from typing import Optional

import numpy as np

from anpr_focus.domain.Models.rect import Rect


@dataclass
class PlateDetection:
    """
    Observación de una placa sacada de la búsqueda ROI, lista para votar.
    """
    text: str                  # texto sanitizado
    area: int                  # área del rectángulo global
    image: np.ndarray          # recorte normalizado
    rect: Rect
    center_distance: float     # distancia normalizada al centro del frame


@dataclass
class WindowPlateEntry:
    """
    Votos acumulados por un texto dentro de una ventana de votación.
    """
    count: int = 0
    best_area: int = 0
    image: Optional[np.ndarray] = None
    center_distance: float = float("inf")


@dataclass
class PlateEntry:
    """
    Registro permanente (durante la sesión) de una placa confirmada.
    """
    image: np.ndarray
    area: int
