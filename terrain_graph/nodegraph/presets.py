# terrain_graph/nodegraph/presets.py
from __future__ import annotations

from .loader import graph_from_dict
from .model import Graph

# Стартовый граф редактора: два шума и выход (соединений нет)
DEFAULT_GRAPH = {
    "nodes": [
        {"id": "n1", "title": "Noise", "type": "noise", "params": {"scale": 1.5, "amplitude": 1},
         "outputs": [{"id": "n1-height", "label": "height"}]},
        {"id": "n2", "title": "Noise 2", "type": "noise", "params": {"scale": 2.5, "amplitude": 0.5},
         "outputs": [{"id": "n2-height", "label": "height"}]},
        {"id": "n3", "title": "Output", "type": "output", "params": {},
         "inputs": [{"id": "n3-h", "label": "h"}]},
    ],
    "connections": [],
}


def default_graph() -> Graph:
    return graph_from_dict(DEFAULT_GRAPH)
