from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np


@dataclass
class Frame:
    """
    Representa un frame capturado desde una cámara.
    """
    data: np.ndarray   # imagen en formato numpy array (BGR)
    timestamp: float   # momento en que se capturó
    source: str        # identificador de la cámara o URL
    rotation_degrees: int = 0   # rotación que reporta la fuente (0/90/180/270)

    _release: Optional[Callable[["Frame"], None]] = field(default=None, repr=False, compare=False)
    _closed: bool = field(default=False, repr=False, compare=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def upright(self) -> np.ndarray:
        """Devuelve el buffer con la rotación ya aplicada."""
        from anpr_focus.infrastructure.Imaging.image_ops import rotate_quadrant
        return rotate_quadrant(self.data, self.rotation_degrees)

    def close(self) -> None:
        """Libera el buffer (una sola vez) avisando a la fuente si lo pidió."""
        if self._closed:
            return
        self._closed = True
        if self._release is not None:
            self._release(self)
