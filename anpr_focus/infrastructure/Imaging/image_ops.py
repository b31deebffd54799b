"""Primitive image operations on numpy/OpenCV buffers.

Everything here works on ``np.ndarray`` images laid out as OpenCV expects
(H x W or H x W x C). Rectangles are :class:`Rect` with exclusive
right/bottom edges, so a crop is a plain slice.
"""

from typing import Optional

import cv2
import numpy as np

from anpr_focus.domain.Models.rect import Rect


_QUADRANT_ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def image_size(image: np.ndarray) -> tuple[int, int]:
    """Return ``(width, height)`` of an image."""
    return int(image.shape[1]), int(image.shape[0])


def rotate_quadrant(image: np.ndarray, rotation_degrees: int) -> np.ndarray:
    """Apply the rotation reported by the frame source (multiples of 90)."""
    rotation = rotation_degrees % 360
    if rotation == 0:
        return image
    code = _QUADRANT_ROTATIONS.get(rotation)
    if code is None:
        raise ValueError(f"Unsupported frame rotation: {rotation_degrees}")
    return cv2.rotate(image, code)


def crop(image: np.ndarray, rect: Rect) -> Optional[np.ndarray]:
    """
    Crop ``rect`` out of ``image`` after clamping it to the image bounds.

    Returns ``None`` only when the image itself is empty.
    """
    width, height = image_size(image)
    if width <= 0 or height <= 0:
        return None
    left = min(max(rect.left, 0), width - 1)
    top = min(max(rect.top, 0), height - 1)
    right = min(max(rect.right, left + 1), width)
    bottom = min(max(rect.bottom, top + 1), height)
    if right - left <= 0 or bottom - top <= 0:
        return None
    return image[top:bottom, left:right].copy()


def safe_crop(image: np.ndarray, rect: Rect) -> np.ndarray:
    """Like :func:`crop`, but falls back to a copy of the whole image."""
    cropped = crop(image, rect)
    return cropped if cropped is not None else image.copy()


def rotate_about_center(image: np.ndarray, angle_degrees: float) -> np.ndarray:
    """
    Rotate ``image`` counter-clockwise by ``angle_degrees`` about its own
    centre, keeping the same canvas size.
    """
    width, height = image_size(image)
    matrix = cv2.getRotationMatrix2D((width / 2.0, height / 2.0), angle_degrees, 1.0)
    return cv2.warpAffine(
        image,
        matrix,
        (width, height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )


def resize(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinear resize to ``width`` x ``height``."""
    return cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Ensure a 3-channel BGR image (gray and BGRA are converted)."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    if image.shape[2] == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image


def placeholder_image() -> np.ndarray:
    """1x1 black image used when a plate is confirmed without a snapshot."""
    return np.zeros((1, 1, 3), dtype=np.uint8)
