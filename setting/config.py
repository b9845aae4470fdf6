from dataclasses import dataclass
from typing import Optional


@dataclass
class PreviewConfig:
    # превью редактора: сетка 64x64 вершины
    width: int = 64
    height: int = 64
    seed: int = 1337

    # >1: независимые поддеревья графа считаются в пуле потоков
    workers: int = 1
    # сколько строк шума считать между проверками отмены
    batch_rows: int = 32

    log_level: str = "INFO"
    log_file: Optional[str] = None
    dump_path: Optional[str] = None

    def validate(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Размер карты (ширина и высота) должен быть больше нуля.")
        if self.workers < 1:
            raise ValueError("Число потоков (workers) должно быть не меньше 1.")
        if self.batch_rows < 1:
            raise ValueError("batch_rows должен быть не меньше 1.")
