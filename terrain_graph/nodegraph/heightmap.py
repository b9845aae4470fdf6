# terrain_graph/nodegraph/heightmap.py
from __future__ import annotations
import dataclasses
import numpy as np

from ..numerics.diag import array_stats


@dataclasses.dataclass(frozen=True, eq=False)
class Heightmap:
    """Результат вычисления: плоский row-major массив width*height (float32)."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.data.shape != (self.width * self.height,):
            raise ValueError(
                f"Heightmap data must have length {self.width * self.height}, got shape {self.data.shape}"
            )

    def as_grid(self) -> np.ndarray:
        """Вид (height, width) без копирования, только для чтения."""
        grid = self.data.reshape(self.height, self.width)
        grid.flags.writeable = False
        return grid

    def value_at(self, x: int, y: int) -> float:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Cell ({x}, {y}) is outside {self.width}x{self.height} heightmap")
        return float(self.data[y * self.width + x])

    def stats(self) -> dict:
        return array_stats(self.data)
