# ==============================================================================
# Файл: terrain_graph/nodegraph/runner.py
# Назначение: Точка входа вычисления графа. Находит выходную ноду, строит
#             план и исполняет его пачками, записывая результат каждой ноды
#             в кэш ровно один раз.
# ==============================================================================
from __future__ import annotations
import concurrent.futures
import logging
import numbers
import threading
from typing import Callable, Dict, Optional

import numpy as np

from .cancel import CancelToken
from .errors import InvalidDimensionsError
from .heightmap import Heightmap
from .model import Graph
from .operators import Context, Field, apply_operator, runs_kernel
from .planner import ZERO, EvaluationPlan, Source, plan_evaluation
from ..numerics.diag import diag_array

logger = logging.getLogger(__name__)

TickFn = Callable[[int, str], object]
NodeHook = Callable[[str, str], object]


class ResultCache:
    """
    Кэш результатов нод в пределах одного вызова evaluate().
    Запись по принципу insert-if-absent: первое значение остаётся.
    """

    def __init__(self):
        self._fields: Dict[str, Field] = {}
        self._lock = threading.Lock()

    def put_if_absent(self, node_id: str, field: Field) -> Field:
        with self._lock:
            existing = self._fields.get(node_id)
            if existing is not None:
                logger.debug(f"Node '{node_id}' already has a result, keeping the first one.")
                return existing
            self._fields[node_id] = field
            return field

    def get(self, node_id: str) -> Optional[Field]:
        with self._lock:
            return self._fields.get(node_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._fields)


def _check_dimensions(width, height) -> tuple[int, int]:
    for name, v in (("width", width), ("height", height)):
        if isinstance(v, bool) or not isinstance(v, numbers.Integral) or int(v) <= 0:
            raise InvalidDimensionsError(f"{name} must be a positive integer, got {v!r}")
    return int(width), int(height)


def _safe_call(fn, *args) -> None:
    if fn is None:
        return
    try:
        fn(*args)
    except Exception:
        logger.warning("Error in evaluation callback.", exc_info=True)


def evaluate(
        graph: Graph,
        width: int,
        height: int,
        seed: int = 1337,
        *,
        cancel: CancelToken | None = None,
        on_tick: TickFn | None = None,
        on_node: NodeHook | None = None,
        workers: int = 1,
        batch_rows: int = 32,
) -> Optional[Heightmap]:
    """
    Вычисляет карту высот на выходной ноде графа.

    Args:
        graph: Неизменяемый снимок графа.
        width, height: Размер сетки (положительные целые).
        seed: Глобальный сид шума.
        cancel: Токен кооперативной отмены.
        on_tick: Колбэк прогресса (percent, message).
        on_node: Вызывается один раз для каждой вычисленной ноды (node_id, kind).
        workers: >1 - ноды одной пачки считаются параллельно в пуле потоков.
        batch_rows: Сколько строк шума считать между проверками отмены.
    Returns:
        Heightmap или None, если в графе нет выходной ноды.
    Raises:
        InvalidDimensionsError: width/height не положительные целые.
        EvaluationCancelled: вычисление отменено через cancel.
    """
    width, height = _check_dimensions(width, height)

    out_node = graph.find_output()
    if out_node is None:
        logger.info("Graph has no output node, nothing to evaluate.")
        return None

    ctx = Context(width=width, height=height, seed=int(seed),
                  batch_rows=max(1, int(batch_rows)), cancel=cancel)

    logger.info(f"Graph run started: {len(graph.nodes)} nodes, {width}x{height}, seed={ctx.seed}.")
    _safe_call(on_tick, 10, f"Evaluating from node '{out_node.id}'...")

    plan = plan_evaluation(graph, out_node.id)
    cache = ResultCache()
    _execute_plan(graph, plan, ctx, cache, on_tick=on_tick, on_node=on_node, workers=workers)

    field = cache.get(out_node.id)
    diag_array(field, name="final_map")
    if not np.isfinite(field).all():
        logger.warning("Result contains NaN or Inf values.")

    logger.info(f"Graph computation finished: {len(cache)} nodes evaluated.")
    _safe_call(on_tick, 100, f"Size: {width}x{height}")
    return Heightmap(width=width, height=height, data=np.ascontiguousarray(field).reshape(-1))


def _execute_plan(
        graph: Graph,
        plan: EvaluationPlan,
        ctx: Context,
        cache: ResultCache,
        *,
        on_tick: TickFn | None,
        on_node: NodeHook | None,
        workers: int,
) -> None:
    total = max(1, len(plan))
    done = 0

    def read(src: Source) -> Optional[Field]:
        if src is None:
            return None
        if src is ZERO:
            return ctx.zeros()
        return cache.get(src)

    def compute(node_id: str) -> Field:
        ctx.check_cancelled()
        node = graph.node(node_id)
        inputs = [read(s) for s in plan.sources[node_id]]
        field = apply_operator(node, inputs, ctx)
        field = cache.put_if_absent(node_id, field)
        _safe_call(on_node, node_id, node.kind)
        diag_array(field, name=f"node '{node_id}' ({node.kind})")
        return field

    pool = None
    if workers > 1 and any(len(b) > 1 for b in plan.batches):
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=int(workers),
                                                     thread_name_prefix="terrain-graph")
    try:
        for batch in plan.batches:
            ctx.check_cancelled()
            # ноды с numba-ядром считаются в текущем потоке, в пул уходят только numpy-операции
            pointwise = [nid for nid in batch if not runs_kernel(graph.node(nid))]
            if pool is not None and len(batch) > 1 and pointwise:
                futures = [pool.submit(compute, nid) for nid in pointwise]
                try:
                    for nid in batch:
                        if nid not in pointwise:
                            compute(nid)
                    for f in futures:
                        f.result()
                finally:
                    for f in futures:
                        f.cancel()
            else:
                for nid in batch:
                    compute(nid)
            done += len(batch)
            _safe_call(on_tick, 10 + int(85 * done / total), f"Evaluated {done}/{total} nodes")
    finally:
        if pool is not None:
            pool.shutdown(wait=True)
