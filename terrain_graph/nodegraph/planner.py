# ==============================================================================
# Файл: terrain_graph/nodegraph/planner.py
# Назначение: Разрешение зависимостей от выходной ноды.
#             Обход повторяет рекурсивную схему "memo -> нет ноды -> цикл ->
#             входы по портам", но на явном стеке, поэтому глубина графа не
#             упирается в лимит рекурсии Python. Результат - план: для каждой
#             ноды источники её входов и пачки нод в топологическом порядке.
# ==============================================================================
from __future__ import annotations
import dataclasses
import logging
from typing import Dict, List, Optional, Set, Tuple, Union

from .model import Graph, Node, Port

logger = logging.getLogger(__name__)


class _ZeroSource:
    """Источник-заглушка: нулевое поле (висячая ссылка или замыкание цикла)."""

    def __repr__(self) -> str:
        return "ZERO"


ZERO = _ZeroSource()
_PENDING = object()

# id ноды | ZERO | None (вход не подключён)
Source = Union[str, _ZeroSource, None]


@dataclasses.dataclass(frozen=True)
class EvaluationPlan:
    root: str
    order: Tuple[str, ...]
    sources: Dict[str, Tuple[Source, ...]]
    batches: Tuple[Tuple[str, ...], ...]
    cycles: Tuple[Tuple[str, str], ...] = ()   # (потребитель, нода, замкнувшая цикл)
    dangling: Tuple[Tuple[str, str], ...] = ()  # (потребитель, отсутствующий id)

    def __len__(self) -> int:
        return len(self.order)


@dataclasses.dataclass
class _Frame:
    node: Node
    slots: Tuple[Port, ...]
    sources: List[Source] = dataclasses.field(default_factory=list)


def plan_evaluation(graph: Graph, root_id: str) -> EvaluationPlan:
    planned: Dict[str, Tuple[Source, ...]] = {}
    level: Dict[str, int] = {}
    order: List[str] = []
    visiting: Set[str] = set()
    stack: List[_Frame] = []
    cycles: List[Tuple[str, str]] = []
    dangling: List[Tuple[str, str]] = []

    def enter(node_id: str, consumer: Optional[str]):
        if node_id in planned:
            return node_id
        node = graph.node(node_id)
        if node is None:
            dangling.append((consumer or "", node_id))
            return ZERO
        if node_id in visiting:
            cycles.append((consumer or "", node_id))
            return ZERO
        visiting.add(node_id)
        stack.append(_Frame(node=node, slots=node.input_slots()))
        return _PENDING

    root = enter(root_id, None)
    if root is not _PENDING:
        # корня нет в графе
        return EvaluationPlan(root=root_id, order=(), sources={}, batches=(),
                              dangling=tuple(dangling))

    while stack:
        frame = stack[-1]
        done = len(frame.sources)
        if done < len(frame.slots):
            port = frame.slots[done]
            conn = graph.source_for(frame.node.id, port.id)
            if conn is None:
                frame.sources.append(None)
                continue
            res = enter(conn.source.node_id, frame.node.id)
            if res is not _PENDING:
                frame.sources.append(res)
            continue

        stack.pop()
        nid = frame.node.id
        srcs = tuple(frame.sources)
        planned[nid] = srcs
        level[nid] = 1 + max((level[s] for s in srcs if isinstance(s, str)), default=-1)
        order.append(nid)
        # нода снова доступна по другому (нециклическому) пути
        visiting.discard(nid)
        if stack:
            stack[-1].sources.append(nid)

    by_level: Dict[int, List[str]] = {}
    for nid in order:
        by_level.setdefault(level[nid], []).append(nid)
    batches = tuple(tuple(by_level[k]) for k in sorted(by_level))

    if cycles:
        logger.warning(
            "Cycle detected: " + ", ".join(f"'{c}' -> '{n}'" for c, n in cycles)
            + " (closing edges contribute zeros)"
        )
    if dangling:
        logger.warning(
            "Dangling connections to missing nodes: " + ", ".join(f"'{n}'" for _, n in dangling)
        )

    return EvaluationPlan(
        root=root_id,
        order=tuple(order),
        sources=planned,
        batches=batches,
        cycles=tuple(cycles),
        dangling=tuple(dangling),
    )
