# ========================
# file: terrain_graph/nodegraph/loader.py
# ========================
from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Tuple

from .errors import GraphFormatError
from .model import Connection, Endpoint, Graph, Node, Port, default_ports, make_operator

logger = logging.getLogger(__name__)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise GraphFormatError(msg)


def _first(d: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d:
            return d[k]
    return default


def _ports(raw: Any, where: str) -> Tuple[Port, ...]:
    _require(isinstance(raw, (list, tuple)), f"{where} must be a list of ports")
    ports = []
    for i, p in enumerate(raw):
        if isinstance(p, str):
            ports.append(Port(id=p, label=p))
            continue
        _require(isinstance(p, Mapping) and "id" in p, f"{where}[{i}] must have an 'id'")
        ports.append(Port(id=str(p["id"]), label=str(p.get("label", p["id"]))))
    return tuple(ports)


def _endpoint(raw: Any, where: str) -> Endpoint:
    _require(isinstance(raw, Mapping), f"{where} must be a mapping")
    node_id = _first(raw, "node_id", "nodeId")
    port_id = _first(raw, "port_id", "portId")
    _require(node_id is not None, f"{where}.node_id is required")
    _require(port_id is not None, f"{where}.port_id is required")
    return Endpoint(node_id=str(node_id), port_id=str(port_id))


def node_from_dict(data: Mapping[str, Any]) -> Node:
    _require(isinstance(data, Mapping), "node must be a mapping")
    nid = data.get("id")
    _require(isinstance(nid, str) and bool(nid), "node.id must be non-empty string")
    kind = _first(data, "type", "nodeType", "kind")
    _require(isinstance(kind, str) and bool(kind), f"node '{nid}': type must be non-empty string")

    params = data.get("params") or {}
    _require(isinstance(params, Mapping), f"node '{nid}': params must be a mapping")
    op = make_operator(kind, params)

    inputs = _ports(data["inputs"], f"node '{nid}'.inputs") if "inputs" in data \
        else default_ports(op.input_ports)
    outputs = _ports(data["outputs"], f"node '{nid}'.outputs") if "outputs" in data \
        else default_ports(op.output_ports)
    if len(inputs) < op.input_arity:
        logger.warning(
            f"Node '{nid}' ({kind}) declares {len(inputs)} inputs, operator reads {op.input_arity}; "
            f"missing inputs are treated as unconnected."
        )
    if len(outputs) < op.output_arity:
        logger.warning(f"Node '{nid}' ({kind}) declares no output port, its result cannot be connected.")
    return Node(id=nid, op=op, inputs=inputs, outputs=outputs, title=str(data.get("title", "")))


def connection_from_dict(data: Mapping[str, Any], index: int = 0) -> Connection:
    _require(isinstance(data, Mapping), f"connections[{index}] must be a mapping")
    src = _first(data, "from", "source")
    dst = _first(data, "to", "target")
    return Connection(
        source=_endpoint(src, f"connections[{index}].from"),
        target=_endpoint(dst, f"connections[{index}].to"),
        id=str(data.get("id", "")),
    )


def graph_from_dict(data: Mapping[str, Any]) -> Graph:
    """
    Строит снимок графа из словаря, который отдаёт редактор:
        {"nodes": [{"id", "type", "params", "inputs", "outputs", "title"}, ...],
         "connections": [{"id", "from": {"node_id", "port_id"}, "to": {...}}, ...]}
    Допускаются ключи в стиле camelCase (nodeType, nodeId, portId).

    Raises:
        GraphFormatError: описание нельзя превратить в граф.
    """
    _require(isinstance(data, Mapping), "graph must be a mapping")
    raw_nodes = data.get("nodes", [])
    raw_conns = data.get("connections", [])
    _require(isinstance(raw_nodes, (list, tuple)), "graph.nodes must be a list")
    _require(isinstance(raw_conns, (list, tuple)), "graph.connections must be a list")

    nodes = tuple(node_from_dict(n) for n in raw_nodes)
    connections = tuple(connection_from_dict(c, i) for i, c in enumerate(raw_conns))
    return Graph(nodes=nodes, connections=connections)


def graph_to_dict(graph: Graph) -> Dict[str, Any]:
    return {
        "nodes": [
            {
                "id": n.id,
                "type": n.kind,
                "title": n.title,
                "params": n.op.params(),
                "inputs": [{"id": p.id, "label": p.label} for p in n.inputs],
                "outputs": [{"id": p.id, "label": p.label} for p in n.outputs],
            }
            for n in graph.nodes
        ],
        "connections": [
            {
                "id": c.id,
                "from": {"node_id": c.source.node_id, "port_id": c.source.port_id},
                "to": {"node_id": c.target.node_id, "port_id": c.target.port_id},
            }
            for c in graph.connections
        ],
    }
