from .noise_helpers import hash01, node_seed
from .value_noise import value_noise, fractal_noise, fractal_noise_rows, fractal_noise_grid

__all__ = [
    "hash01",
    "node_seed",
    "value_noise",
    "fractal_noise",
    "fractal_noise_rows",
    "fractal_noise_grid",
]
