# ==============================================================================
# Файл: terrain_graph/nodegraph/editing.py
# Назначение: Операции редактирования снимка графа. Каждая возвращает новый
#             Graph, исходный снимок не меняется.
# ==============================================================================
from __future__ import annotations
import dataclasses
import logging
import uuid
from typing import Any, Mapping, Optional

from .errors import GraphFormatError
from .model import Connection, Endpoint, Graph, Node, default_ports, make_operator

logger = logging.getLogger(__name__)


def make_node(kind: str, params: Mapping[str, Any] | None = None, *,
              node_id: Optional[str] = None, title: str = "") -> Node:
    """Новая нода с портами по умолчанию для своего типа."""
    op = make_operator(kind, params)
    return Node(
        id=node_id or uuid.uuid4().hex,
        op=op,
        inputs=default_ports(op.input_ports),
        outputs=default_ports(op.output_ports),
        title=title or kind.capitalize(),
    )


def add_node(graph: Graph, node: Node) -> Graph:
    if node.id in graph:
        raise GraphFormatError(f"Node id '{node.id}' already exists")
    return Graph(nodes=graph.nodes + (node,), connections=graph.connections)


def remove_node(graph: Graph, node_id: str) -> Graph:
    """Удаляет ноду и все соединения, которые её касаются."""
    nodes = tuple(n for n in graph.nodes if n.id != node_id)
    conns = tuple(
        c for c in graph.connections
        if c.source.node_id != node_id and c.target.node_id != node_id
    )
    return Graph(nodes=nodes, connections=conns)


def connect(graph: Graph, src_node: str, src_port: str, dst_node: str, dst_port: str,
            *, conn_id: Optional[str] = None) -> Graph:
    """Добавляет соединение выход -> вход. Точный дубликат игнорируется."""
    source = Endpoint(src_node, src_port)
    target = Endpoint(dst_node, dst_port)
    for c in graph.connections:
        if c.source == source and c.target == target:
            logger.debug(f"Connection {source} -> {target} already exists.")
            return graph
    conn = Connection(source=source, target=target, id=conn_id or uuid.uuid4().hex)
    return Graph(nodes=graph.nodes, connections=graph.connections + (conn,))


def disconnect(graph: Graph, conn_id: str) -> Graph:
    return Graph(
        nodes=graph.nodes,
        connections=tuple(c for c in graph.connections if c.id != conn_id),
    )


def set_params(graph: Graph, node_id: str, params: Mapping[str, Any]) -> Graph:
    """Обновляет параметры ноды (поверх текущих), тип и порты не меняются."""
    node = graph.node(node_id)
    if node is None:
        raise GraphFormatError(f"Node '{node_id}' not found")
    merged = {**node.op.params(), **dict(params)}
    updated = dataclasses.replace(node, op=make_operator(node.kind, merged))
    return Graph(
        nodes=tuple(updated if n.id == node_id else n for n in graph.nodes),
        connections=graph.connections,
    )
