# anpr_focus/domain/Services/geometry.py
"""
Utilidades de rectángulos para la búsqueda ROI.

Todas las funciones devuelven rectángulos nuevos (Rect es inmutable) y
redondean "half-up" para que los tamaños no dependan del redondeo bancario.
"""
import math
from typing import Optional

from anpr_focus.domain.Models.rect import Rect


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def clamp_to_bounds(rect: Rect, max_w: int, max_h: int) -> Rect:
    """
    Encaja el rectángulo en [0, max_w] x [0, max_h].
    Nunca vacío: right >= left + 1 y bottom >= top + 1.
    """
    max_w = max(max_w, 1)
    max_h = max(max_h, 1)
    left = _clamp(rect.left, 0, max_w - 1)
    top = _clamp(rect.top, 0, max_h - 1)
    right = _clamp(rect.right, left + 1, max_w)
    bottom = _clamp(rect.bottom, top + 1, max_h)
    return Rect(left, top, right, bottom)


def centered_rect(width: int, height: int, fraction: float, min_crop_size: int = 64) -> Rect:
    """
    Rectángulo centrado que cubre `fraction` del frame en cada eje
    (fraction en [0.1, 1.0]), con lado mínimo `min_crop_size`.
    """
    fraction = min(max(fraction, 0.1), 1.0)
    target_w = max(round_half_up(width * fraction), min_crop_size)
    target_h = max(round_half_up(height * fraction), min_crop_size)
    left = max((width - target_w) // 2, 0)
    top = max((height - target_h) // 2, 0)
    right = min(left + target_w, width)
    bottom = min(top + target_h, height)
    return clamp_to_bounds(Rect(left, top, right, bottom), width, height)


def expand_horizontally(
    rect: Rect,
    container_width: int,
    min_aspect: float = 2.0,
    expansion_factor: float = 1.3,
) -> Rect:
    """
    Ensancha la caja de una línea: al menos alto * min_aspect y
    ancho * expansion_factor, mismo centro horizontal y misma franja vertical.
    """
    height = max(rect.height, 1)
    min_width = round_half_up(height * min_aspect)
    target_w = max(round_half_up(rect.width * expansion_factor), min_width)

    left = rect.center_x - target_w // 2
    right = left + target_w
    if left < 0:
        right -= left
        left = 0
    if right > container_width:
        left -= right - container_width
        right = container_width
    left = max(left, 0)
    right = min(right, container_width)

    if left >= right:
        # la expansión colapsó: devolver la original recortada al contenedor
        return Rect(max(rect.left, 0), rect.top, min(rect.right, container_width), rect.bottom)
    return Rect(left, rect.top, right, rect.bottom)


def trim_vertically(
    rect: Rect,
    max_height: int,
    shrink_factor: float = 0.85,
    min_crop_size: int = 64,
) -> Optional[Rect]:
    """
    Reduce la altura alrededor del centro vertical.
    None cuando ya no se puede recortar más (alto <= min_crop_size).
    """
    current = rect.height
    if current <= min_crop_size:
        return None

    target = max(round_half_up(current * shrink_factor), min_crop_size)
    if target == current:
        return None

    center_y = rect.center_y
    top = center_y - target // 2
    bottom = center_y + target // 2
    if top < 0:
        bottom -= top
        top = 0
    if bottom > max_height:
        top -= bottom - max_height
        bottom = max_height
    top = max(top, 0)
    bottom = min(bottom, max_height)
    if top >= bottom:
        return None
    return Rect(rect.left, top, rect.right, bottom)
