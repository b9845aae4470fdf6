# ==============================================================================
# Файл: terrain_graph/nodegraph/operators.py
# Назначение: Реализация операторов нод. Каждая функция получает ноду,
#             уже вычисленные входы (или None) и контекст вычисления и
#             возвращает новое поле формы (height, width), float32.
# ==============================================================================
from __future__ import annotations
import dataclasses
import logging
import threading
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from .cancel import CancelToken
from .model import AddOp, ClampOp, MultiplyOp, Node, NoiseOp, Operator, OutputOp, UnknownOp
from ..numerics.noise_helpers import node_seed
from ..numerics.value_noise import fractal_noise_rows

logger = logging.getLogger(__name__)

Field = np.ndarray
Inputs = Sequence[Optional[Field]]


@dataclasses.dataclass(frozen=True)
class Context:
    width: int
    height: int
    seed: int
    batch_rows: int = 32
    cancel: CancelToken | None = None

    def zeros(self) -> Field:
        return np.zeros((self.height, self.width), dtype=np.float32)

    def check_cancelled(self) -> None:
        if self.cancel is not None:
            self.cancel.raise_if_cancelled()


OperatorFn = Callable[[Node, Inputs, Context], Field]

# parallel-ядра numba запускаются только из потока, вызвавшего evaluate(),
# и по одному: слои tbb/workqueue не переносят запуск из рабочих потоков пула
_KERNEL_LOCK = threading.Lock()

# операторы, которые вызывают parallel-ядра numba
KERNEL_OPS: tuple[type[Operator], ...] = (NoiseOp,)

# — реестр —
DISPATCH: Dict[type[Operator], OperatorFn] = {}


def implements(op_type: type[Operator]):
    def deco(fn: OperatorFn) -> OperatorFn:
        DISPATCH[op_type] = fn
        return fn
    return deco


def _input(inputs: Inputs, idx: int) -> Optional[Field]:
    return inputs[idx] if idx < len(inputs) else None


@implements(NoiseOp)
def op_noise(node: Node, inputs: Inputs, ctx: Context) -> Field:
    op: NoiseOp = node.op  # type: ignore[assignment]
    out = ctx.zeros()
    seed = node_seed(ctx.seed, node.id)
    step = max(1, int(ctx.batch_rows))
    for row0 in range(0, ctx.height, step):
        ctx.check_cancelled()
        row1 = min(ctx.height, row0 + step)
        with _KERNEL_LOCK:
            fractal_noise_rows(out, row0, row1, seed, float(op.scale), float(op.amplitude))
    return out


@implements(AddOp)
def op_add(node: Node, inputs: Inputs, ctx: Context) -> Field:
    a, b = _input(inputs, 0), _input(inputs, 1)
    out = ctx.zeros()
    if a is not None and b is not None:
        np.add(a, b, out=out)
    elif a is not None:
        out[...] = a
    elif b is not None:
        out[...] = b
    return out


@implements(MultiplyOp)
def op_multiply(node: Node, inputs: Inputs, ctx: Context) -> Field:
    a, b = _input(inputs, 0), _input(inputs, 1)
    out = ctx.zeros()
    if a is not None and b is not None:
        np.multiply(a, b, out=out)
    elif a is not None:
        out[...] = a
    # только второй вход: остаются нули (как в исходном поведении)
    return out


@implements(ClampOp)
def op_clamp(node: Node, inputs: Inputs, ctx: Context) -> Field:
    op: ClampOp = node.op  # type: ignore[assignment]
    a = _input(inputs, 0)
    out = ctx.zeros()
    if a is not None:
        # min(max, max(min, a)): при min > max везде получается max
        np.minimum(np.maximum(a, np.float32(op.min)), np.float32(op.max), out=out)
    return out


@implements(OutputOp)
def op_output(node: Node, inputs: Inputs, ctx: Context) -> Field:
    a = _input(inputs, 0)
    out = ctx.zeros()
    if a is not None:
        out[...] = a
    return out


@implements(UnknownOp)
def op_unknown(node: Node, inputs: Inputs, ctx: Context) -> Field:
    return ctx.zeros()


def apply_operator(node: Node, inputs: Inputs, ctx: Context) -> Field:
    fn = DISPATCH.get(type(node.op))
    if fn is None:
        logger.warning(f"No implementation for operator '{node.kind}' (node '{node.id}'), using zeros.")
        return ctx.zeros()
    return fn(node, inputs, ctx)


def runs_kernel(node: Node) -> bool:
    return isinstance(node.op, KERNEL_OPS)
