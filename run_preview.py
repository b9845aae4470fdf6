# ==============================================================================
# Файл: run_preview.py
# Назначение: Вычисляет карту высот стартового графа и печатает статистику.
# Запуск: python run_preview.py [--add | --multiply] [--width 64 --height 64 --seed 1337 ...]
# ==============================================================================
import argparse
import logging
import sys

import numpy as np

from setting.config import PreviewConfig
from terrain_graph import evaluate
from terrain_graph.nodegraph.editing import add_node, connect, make_node
from terrain_graph.nodegraph.presets import default_graph
from terrain_graph.setup_logging import setup_logging

logger = logging.getLogger(__name__)


def build_graph(combine: str | None):
    graph = default_graph()
    if combine is None:
        return graph
    # n1, n2 -> combine -> n3 (output)
    graph = add_node(graph, make_node(combine, node_id="n4"))
    graph = connect(graph, "n1", "n1-height", "n4", "a")
    graph = connect(graph, "n2", "n2-height", "n4", "b")
    graph = connect(graph, "n4", "out", "n3", "n3-h")
    return graph


def build_parser() -> argparse.ArgumentParser:
    defaults = PreviewConfig()
    parser = argparse.ArgumentParser(description="Вычисляет карту высот стартового графа")
    combine = parser.add_mutually_exclusive_group()
    combine.add_argument("--add", dest="combine", action="store_const", const="add",
                         help="Сложить два шума через ноду add")
    combine.add_argument("--multiply", dest="combine", action="store_const", const="multiply",
                         help="Перемножить два шума через ноду multiply")
    parser.add_argument("--width", type=int, default=defaults.width)
    parser.add_argument("--height", type=int, default=defaults.height)
    parser.add_argument("--seed", type=int, default=defaults.seed)
    parser.add_argument("--workers", type=int, default=defaults.workers,
                        help="Потоков для независимых нод одной пачки")
    parser.add_argument("--batch-rows", type=int, default=defaults.batch_rows,
                        help="Строк шума между проверками отмены")
    parser.add_argument("--log-level", default=defaults.log_level)
    parser.add_argument("--log-file", default=defaults.log_file)
    parser.add_argument("--dump", dest="dump_path", default=defaults.dump_path,
                        help="Сохранить сетку в .npy")
    return parser


def main(argv: list[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = PreviewConfig(
        width=args.width, height=args.height, seed=args.seed,
        workers=args.workers, batch_rows=args.batch_rows,
        log_level=args.log_level, log_file=args.log_file, dump_path=args.dump_path,
    )
    try:
        cfg.validate()
    except ValueError as e:
        parser.error(str(e))

    setup_logging(cfg.log_level, cfg.log_file)
    graph = build_graph(args.combine)

    def tick(p, m):
        logger.debug(f"[{p:3d}%] {m}")

    result = evaluate(graph, cfg.width, cfg.height, cfg.seed,
                      on_tick=tick, workers=cfg.workers, batch_rows=cfg.batch_rows)
    if result is None:
        logger.info("--- В графе нет выходной ноды, показывать нечего ---")
        return 0

    s = result.stats()
    logger.info(
        f"Heightmap {result.width}x{result.height}: "
        f"min={s['min']:.4f} max={s['max']:.4f} mean={s['mean']:.4f}"
    )
    if cfg.dump_path:
        np.save(cfg.dump_path, result.as_grid())
        logger.info(f"Saved grid to {cfg.dump_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
