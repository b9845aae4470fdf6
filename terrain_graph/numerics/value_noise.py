# ==============================================================================
# Файл: terrain_graph/numerics/value_noise.py
# Назначение: Value Noise 2D и фрактальный (4 октавы) шум для нод "noise".
#             Скалярные функции + построчное заполнение сетки через prange.
# ==============================================================================
from __future__ import annotations
import math
import numpy as np
from numba import njit, prange

from .noise_helpers import hash01, _smoothstep, _lerp

OCTAVES = 4
OCTAVE_SEED_STEP = 19
# 1 + 0.5 + 0.25 + 0.125: сумма весов октав, амплитуда не зависит от их числа
OCTAVE_WEIGHT_SUM = 1.875
MIN_SCALE = 1e-4
COORD_SPAN = 10.0


@njit(inline='always', cache=True)
def value_noise(x: float, y: float, seed: int) -> float:
    """
    Базовый Value Noise 2D. Билинейная интерполяция хэшей четырёх соседних
    узлов решётки со сглаживанием 3t^2 - 2t^3. Возвращает значение в [0, 1).
    """
    xi, yi = int(math.floor(x)), int(math.floor(y))
    xf, yf = x - xi, y - yi
    u, v = _smoothstep(xf), _smoothstep(yf)
    n00 = hash01(xi, yi, seed); n10 = hash01(xi + 1, yi, seed)
    n01 = hash01(xi, yi + 1, seed); n11 = hash01(xi + 1, yi + 1, seed)
    top = _lerp(n00, n10, u)
    bottom = _lerp(n01, n11, u)
    return _lerp(top, bottom, v)


@njit(inline='always', cache=True)
def fractal_noise(x: float, y: float, seed: int, scale: float, amplitude: float) -> float:
    """
    Фрактальная сумма 4 октав value noise.

    Частота стартует с 1/scale и удваивается, вклад октавы стартует с
    amplitude и делится пополам. Каждая октава получает свой сид
    (seed + o*19). Сумма нормируется на 1.875.
    """
    freq = 1.0 / max(MIN_SCALE, scale)
    amp = amplitude
    total = 0.0
    for o in range(OCTAVES):
        total += value_noise(x * freq, y * freq, seed + o * OCTAVE_SEED_STEP) * amp
        freq *= 2.0
        amp *= 0.5
    return total / OCTAVE_WEIGHT_SUM


@njit(inline='always', cache=True)
def grid_coord(i: int, n: int) -> float:
    """Индекс клетки -> центрированная координата в [-5, 5)."""
    return (i / n - 0.5) * COORD_SPAN


@njit(cache=True, parallel=True)
def fractal_noise_rows(
        out: np.ndarray,
        row0: int,
        row1: int,
        seed: int,
        scale: float,
        amplitude: float,
) -> None:
    """
    Заполняет строки [row0, row1) сетки out (форма (H, W), float32).
    Разбиение на пачки строк нужно для кооперативной отмены между пачками.
    """
    H, W = out.shape
    for j in prange(row0, row1):
        ny = grid_coord(j, H)
        for i in range(W):
            nx = grid_coord(i, W)
            out[j, i] = fractal_noise(nx, ny, seed, scale, amplitude)


def fractal_noise_grid(width: int, height: int, seed: int, scale: float, amplitude: float) -> np.ndarray:
    """Удобная обёртка: вся сетка (height, width) за один вызов."""
    out = np.zeros((height, width), dtype=np.float32)
    fractal_noise_rows(out, 0, height, int(seed), float(scale), float(amplitude))
    return out
