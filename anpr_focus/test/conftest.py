from typing import Callable

import numpy as np
import pytest

from anpr_focus.infrastructure.Normalizer.plate_normalizer import PlateNormalizer


@pytest.fixture
def normalizer() -> PlateNormalizer:
    return PlateNormalizer(min_len=5, max_len=7)


@pytest.fixture
def blank_image() -> Callable[..., np.ndarray]:
    def make(width: int = 400, height: int = 200, value: int = 0) -> np.ndarray:
        return np.full((height, width, 3), value, dtype=np.uint8)
    return make
