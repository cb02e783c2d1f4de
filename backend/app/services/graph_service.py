from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, Sequence
from uuid import uuid4

from backend.app.models.plugin import DSPConnection, DSPNode

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]

DEFAULT_SOURCE_PORT = "output"
DEFAULT_TARGET_PORT = "input"


class GraphCycleError(Exception):
    def __init__(self, diagnostics: list[str]):
        self.diagnostics = diagnostics
        super().__init__("DSP graph contains a cycle")


def new_connection_id() -> str:
    return str(uuid4())


def is_valid_connection(connection: DSPConnection) -> bool:
    return bool(connection.source_node_id.strip()) and bool(connection.target_node_id.strip())


def auto_connect_nodes(
    nodes: Sequence[DSPNode],
    id_factory: IdFactory = new_connection_id,
) -> list[DSPConnection]:
    """Chain ``nodes`` linearly, wiring each node's first output to the next node's first input.

    Nodes without declared ports fall back to the ``output``/``input`` labels. A sequence of
    fewer than two nodes yields no connections.
    """
    connections: list[DSPConnection] = []
    for source, target in zip(nodes, nodes[1:]):
        connections.append(
            DSPConnection(
                id=id_factory(),
                source_node_id=source.id,
                source_port=source.outputs[0] if source.outputs else DEFAULT_SOURCE_PORT,
                target_node_id=target.id,
                target_port=target.inputs[0] if target.inputs else DEFAULT_TARGET_PORT,
            )
        )
    return connections


def get_processing_order(nodes: Sequence[DSPNode], connections: Iterable[DSPConnection]) -> list[DSPNode]:
    """Return every node exactly once, dependencies first.

    Kahn's algorithm seeded in node-list order. Nodes left unresolved by a cycle are appended
    in their original order, so the result is total but only dependency-correct for acyclic
    graphs.
    """
    ordered = _kahn_order(nodes, connections)
    seen = {node.id for node in ordered}
    leftovers: list[DSPNode] = []
    for node in nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        leftovers.append(node)

    if leftovers:
        logger.debug(
            "Appending %d unordered node(s) after topological pass: %s",
            len(leftovers),
            ", ".join(node.id for node in leftovers),
        )
    return [*ordered, *leftovers]


def get_strict_processing_order(
    nodes: Sequence[DSPNode],
    connections: Iterable[DSPConnection],
) -> list[DSPNode]:
    ordered = _kahn_order(nodes, connections)
    seen = {node.id for node in ordered}
    unresolved = list(dict.fromkeys(node.id for node in nodes if node.id not in seen))
    if unresolved:
        raise GraphCycleError(
            [f"Node '{node_id}' is part of, or depends on, a cycle." for node_id in unresolved]
        )
    return ordered


def _kahn_order(nodes: Sequence[DSPNode], connections: Iterable[DSPConnection]) -> list[DSPNode]:
    node_map: dict[str, DSPNode] = {}
    for node in nodes:
        node_map.setdefault(node.id, node)

    # Insertion order of both maps decides the seed order of the queue.
    adjacency: dict[str, list[str]] = {node.id: [] for node in nodes}
    indegree: dict[str, int] = {node.id: 0 for node in nodes}

    for connection in connections:
        adjacency.setdefault(connection.source_node_id, []).append(connection.target_node_id)
        indegree[connection.target_node_id] = indegree.get(connection.target_node_id, 0) + 1

    queue = deque(node_id for node_id, degree in indegree.items() if degree == 0)
    ordered: list[DSPNode] = []

    while queue:
        node_id = queue.popleft()
        node = node_map.get(node_id)
        if node is not None:
            ordered.append(node)

        for target in adjacency.get(node_id, []):
            indegree[target] = indegree.get(target, 0) - 1
            if indegree[target] == 0:
                queue.append(target)

    return ordered
