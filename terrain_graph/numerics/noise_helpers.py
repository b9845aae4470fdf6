# ==============================================================================
# Файл: terrain_graph/numerics/noise_helpers.py
# Назначение: Низкоуровневые Numba-примитивы для шума: хэш решётки,
#             сглаживание и интерполяция.
# ==============================================================================
from __future__ import annotations
import hashlib
from numba import njit

U32_MASK = 0xFFFFFFFF


@njit(inline='always', cache=True)
def _u32(x: int) -> int: return x & 0xFFFFFFFF


@njit(inline='always', cache=True)
def _hash2(ix: int, iy: int, seed: int) -> int:
    a, b, c = 0x9e3779b3, 0x9e3779b3, 0x9e3779b3
    a = _u32(a + ix); b = _u32(b + iy); c = _u32(c + seed)
    a = _u32(a - b - c) ^ (c >> 13); b = _u32(b - c - a) ^ _u32(a << 8); c = _u32(c - a - b) ^ (b >> 13)
    a = _u32(a - b - c) ^ (c >> 12); b = _u32(b - c - a) ^ _u32(a << 16); c = _u32(c - a - b) ^ (b >> 5)
    a = _u32(a - b - c) ^ (c >> 3); b = _u32(b - c - a) ^ _u32(a << 10); c = _u32(c - a - b) ^ (b >> 15)
    return _u32(c)


@njit(inline='always', cache=True)
def hash01(ix: int, iy: int, seed: int) -> float:
    """Хэш узла решётки в [0, 1)."""
    return _hash2(ix, iy, seed) / 4294967296.0


@njit(inline='always', cache=True)
def _smoothstep(t: float) -> float:
    # 3t^2 - 2t^3: нулевая производная в узлах решётки
    return t * t * (3.0 - 2.0 * t)


@njit(inline='always', cache=True)
def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def node_seed(seed: int, node_id: str) -> int:
    """
    Сид конкретной ноды: глобальный сид, смещённый на хэш её идентификатора.
    Две ноды шума с одинаковыми параметрами дают разные поля.
    """
    h = hashlib.blake2b(digest_size=4)
    h.update(str(node_id).encode("utf-8"))
    offset = int.from_bytes(h.digest(), "little", signed=False)
    return (int(seed) + offset) & U32_MASK
