# ==============================================================================
# Файл: terrain_graph/nodegraph/model.py
# Назначение: Неизменяемый снимок графа: операторы (по одному варианту на
#             тип ноды), порты, ноды, соединения и индексы для поиска.
# ==============================================================================
from __future__ import annotations
import dataclasses
import logging
import math
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

import numpy as np

from .errors import GraphFormatError

logger = logging.getLogger(__name__)

# поля считаются во float32, большие значения переполнились бы в inf
PARAM_LIMIT = float(np.finfo(np.float32).max)


# --- Операторы ---

class Operator:
    kind: ClassVar[str] = "operator"
    input_ports: ClassVar[Tuple[str, ...]] = ()
    output_ports: ClassVar[Tuple[str, ...]] = ("out",)

    @property
    def input_arity(self) -> int:
        return len(self.input_ports)

    @property
    def output_arity(self) -> int:
        return len(self.output_ports)

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None = None) -> "Operator":
        """
        Собирает оператор из "сырого" словаря параметров. Отсутствующие и
        нечисловые значения заменяются значениями по умолчанию.
        """
        params = dict(params or {})
        known = {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else {}
        values: Dict[str, float] = {}
        for key, raw in params.items():
            if key not in known:
                logger.debug(f"{cls.kind}: ignoring unknown parameter '{key}'")
                continue
            value = _as_number(raw)
            if value is None:
                logger.warning(
                    f"{cls.kind}: parameter '{key}'={raw!r} is not a number in float32 range, "
                    f"using default {known[key].default}"
                )
                continue
            values[key] = value
        return cls(**values)

    def params(self) -> Dict[str, float]:
        if dataclasses.is_dataclass(self):
            return dataclasses.asdict(self)
        return {}


def _as_number(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or abs(value) > PARAM_LIMIT:
        return None
    return value


OPERATORS: dict[str, type[Operator]] = {}


def register(cls: type[Operator]) -> type[Operator]:
    OPERATORS[cls.kind] = cls
    return cls


@register
@dataclasses.dataclass(frozen=True)
class NoiseOp(Operator):
    kind: ClassVar[str] = "noise"
    input_ports: ClassVar[Tuple[str, ...]] = ()
    output_ports: ClassVar[Tuple[str, ...]] = ("height",)

    scale: float = 2.0
    amplitude: float = 1.0


@register
@dataclasses.dataclass(frozen=True)
class AddOp(Operator):
    kind: ClassVar[str] = "add"
    input_ports: ClassVar[Tuple[str, ...]] = ("a", "b")


@register
@dataclasses.dataclass(frozen=True)
class MultiplyOp(Operator):
    kind: ClassVar[str] = "multiply"
    input_ports: ClassVar[Tuple[str, ...]] = ("a", "b")


@register
@dataclasses.dataclass(frozen=True)
class ClampOp(Operator):
    kind: ClassVar[str] = "clamp"
    input_ports: ClassVar[Tuple[str, ...]] = ("in",)

    min: float = 0.0
    max: float = 1.0


@register
@dataclasses.dataclass(frozen=True)
class OutputOp(Operator):
    kind: ClassVar[str] = "output"
    input_ports: ClassVar[Tuple[str, ...]] = ("h",)
    output_ports: ClassVar[Tuple[str, ...]] = ()


@dataclasses.dataclass(frozen=True)
class UnknownOp(Operator):
    """Тип ноды, который движок не знает. Вычисляется в нули."""
    name: str = "unknown"

    input_ports: ClassVar[Tuple[str, ...]] = ()
    output_ports: ClassVar[Tuple[str, ...]] = ("out",)

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.name

    def params(self) -> Dict[str, float]:
        return {}


def make_operator(kind: str, params: Mapping[str, Any] | None = None) -> Operator:
    cls = OPERATORS.get(kind)
    if cls is None:
        logger.warning(f"Unknown operator kind '{kind}', node will evaluate to zeros.")
        return UnknownOp(name=str(kind))
    return cls.from_params(params)


# --- Порты, ноды, соединения ---

@dataclasses.dataclass(frozen=True)
class Port:
    id: str
    label: str = ""


@dataclasses.dataclass(frozen=True)
class Endpoint:
    node_id: str
    port_id: str


@dataclasses.dataclass(frozen=True)
class Connection:
    source: Endpoint  # выход
    target: Endpoint  # вход
    id: str = ""


def default_ports(names: Tuple[str, ...]) -> Tuple[Port, ...]:
    return tuple(Port(id=n, label=n) for n in names)


@dataclasses.dataclass(frozen=True)
class Node:
    id: str
    op: Operator
    inputs: Tuple[Port, ...] = ()
    outputs: Tuple[Port, ...] = ()
    title: str = ""

    @property
    def kind(self) -> str:
        return self.op.kind

    def input_slots(self) -> Tuple[Port, ...]:
        """Входы, которые читает оператор: не больше его арности."""
        return self.inputs[:self.op.input_arity]


# --- Граф ---

@dataclasses.dataclass(frozen=True)
class Graph:
    nodes: Tuple[Node, ...] = ()
    connections: Tuple[Connection, ...] = ()

    _by_id: Dict[str, Node] = dataclasses.field(init=False, repr=False, compare=False)
    _by_target: Dict[Tuple[str, str], Connection] = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "connections", tuple(self.connections))

        by_id: Dict[str, Node] = {}
        for n in self.nodes:
            if n.id in by_id:
                raise GraphFormatError(f"Duplicate node id '{n.id}'")
            by_id[n.id] = n

        # при нескольких соединениях в один вход побеждает первое
        by_target: Dict[Tuple[str, str], Connection] = {}
        for c in self.connections:
            key = (c.target.node_id, c.target.port_id)
            if key in by_target:
                logger.debug(f"Input {key} has more than one connection, keeping the first one.")
                continue
            by_target[key] = c

        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_by_target", by_target)

    def node(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._by_id

    def source_for(self, node_id: str, port_id: str) -> Optional[Connection]:
        return self._by_target.get((node_id, port_id))

    def incoming(self, node_id: str) -> Tuple[Connection, ...]:
        return tuple(c for c in self.connections if c.target.node_id == node_id)

    def outgoing(self, node_id: str) -> Tuple[Connection, ...]:
        return tuple(c for c in self.connections if c.source.node_id == node_id)

    def find_output(self) -> Optional[Node]:
        for n in self.nodes:
            if isinstance(n.op, OutputOp):
                return n
        return None
