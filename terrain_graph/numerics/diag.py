# terrain_graph/numerics/diag.py
import logging
import numpy as np

logger = logging.getLogger(__name__)


def array_stats(arr: np.ndarray) -> dict:
    """min/max/mean и флаги NaN/Inf для массива."""
    return {
        "min": float(np.min(arr)) if arr.size else 0.0,
        "max": float(np.max(arr)) if arr.size else 0.0,
        "mean": float(np.mean(arr)) if arr.size else 0.0,
        "has_nan": bool(np.isnan(arr).any()),
        "has_inf": bool(np.isinf(arr).any()),
    }


def diag_array(arr: np.ndarray, name: str = "array"):
    """
    Выводит в DEBUG-лог диагностическую информацию о NumPy массиве.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if not isinstance(arr, np.ndarray):
        logger.debug(f"DIAG {name}: Not a NumPy array (type: {type(arr).__name__})")
        return
    s = array_stats(arr)
    logger.debug(
        f"DIAG {name}: shape={arr.shape}, dtype={arr.dtype}, "
        f"min={s['min']:.4f}, max={s['max']:.4f}, mean={s['mean']:.4f}, "
        f"has_nan={s['has_nan']}, has_inf={s['has_inf']}"
    )
