import numpy as np

from anpr_focus.infrastructure.Imaging.image_ops import resize, to_bgr


def image_similarity(first: np.ndarray, second: np.ndarray, sample_size: int = 32) -> float:
    """
    Similitud visual entre dos capturas de placa, en [0, 1].
    Ambas se reducen a sample_size x sample_size (3 canales) y se compara
    píxel a píxel: 1 - diferencia / diferencia máxima.
    Imagen vacía = 0.
    """
    if first is None or second is None or first.size == 0 or second.size == 0:
        return 0.0

    a = resize(to_bgr(first), sample_size, sample_size).astype(np.int64)
    b = resize(to_bgr(second), sample_size, sample_size).astype(np.int64)

    diff_sum = int(np.abs(a[..., :3] - b[..., :3]).sum())
    max_diff = sample_size * sample_size * 255 * 3
    similarity = 1.0 - (diff_sum / max_diff)
    return float(min(max(similarity, 0.0), 1.0))
