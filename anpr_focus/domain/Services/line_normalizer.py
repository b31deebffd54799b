# anpr_focus/domain/Services/line_normalizer.py
import math

import numpy as np

from anpr_focus.domain.Models.text_line import TextLine
from anpr_focus.infrastructure.Imaging.image_ops import rotate_about_center, safe_crop


def skew_angle(line: TextLine) -> float:
    """
    Ángulo (grados) entre las dos primeras esquinas de la línea.
    0.0 si no hay esquinas suficientes o coinciden.
    """
    points = line.corner_points
    if points is None or len(points) < 2:
        return 0.0
    (x0, y0), (x1, y1) = points[0], points[1]
    dx = float(x1) - float(x0)
    dy = float(y1) - float(y0)
    if dx == 0.0 and dy == 0.0:
        return 0.0
    return math.degrees(math.atan2(dy, dx))


def deskew_line(source: np.ndarray, line: TextLine) -> np.ndarray:
    """
    Recorta la caja de la línea y la endereza usando sus esquinas.

    - Sin caja: se usa la imagen completa.
    - Sin ángulo (o ángulo 0): se devuelve el recorte tal cual.
    - Con ángulo: rotación inversa alrededor del centro, mismo lienzo.
    """
    local = safe_crop(source, line.bounding_box) if line.bounding_box is not None else source

    angle = skew_angle(line)
    if angle == 0.0:
        return local

    # cv2 rota en sentido antihorario con ángulo positivo (eje y hacia abajo),
    # que es justo deshacer una inclinación de `angle` grados.
    return rotate_about_center(local, angle)
