from __future__ import annotations

import logging
from typing import Mapping, Sequence, TypeVar

from backend.app.models.plugin import PluginProjectBase
from backend.app.services.graph_service import IdFactory, auto_connect_nodes, is_valid_connection, new_connection_id
from backend.app.services.parameter_binding import map_ui_components_to_parameters

logger = logging.getLogger(__name__)

ProjectT = TypeVar("ProjectT", bound=PluginProjectBase)


def enhance_template_project(
    project: ProjectT,
    id_factory: IdFactory = new_connection_id,
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> ProjectT:
    """Return a copy of ``project`` with usable wiring and parameter-bound widgets.

    Connections with a blank source or target node id are dropped. If nothing valid remains and
    the graph has more than one node, the nodes are chained in their stored order. Widgets are
    bound against the node definitions, which wiring never changes.
    """
    graph = project.dsp_graph
    connections = [connection for connection in graph.connections if is_valid_connection(connection)]
    dropped = len(graph.connections) - len(connections)
    if dropped:
        logger.debug("Dropped %d connection(s) with blank node ids from '%s'", dropped, project.name)

    if not connections and len(graph.nodes) > 1:
        connections = auto_connect_nodes(graph.nodes, id_factory=id_factory)
        logger.info("Auto-wired %d node(s) of '%s' into a linear chain", len(graph.nodes), project.name)

    ui_components = map_ui_components_to_parameters(project.ui_components, graph.nodes, aliases=aliases)

    return project.model_copy(
        update={
            "dsp_graph": graph.model_copy(update={"connections": connections}),
            "ui_components": ui_components,
        }
    )
