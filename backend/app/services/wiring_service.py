from __future__ import annotations

from typing import Mapping, Sequence

from fastapi import HTTPException

from backend.app.models.graph import (
    AutoConnectResponse,
    ParameterBindingRequest,
    ParameterBindingResponse,
    ProcessingOrderResponse,
)
from backend.app.models.plugin import DSPGraph, DSPNode, PluginProjectBase
from backend.app.services.graph_service import (
    GraphCycleError,
    IdFactory,
    auto_connect_nodes,
    get_processing_order,
    get_strict_processing_order,
    new_connection_id,
)
from backend.app.services.parameter_binding import map_ui_components_to_parameters
from backend.app.services.template_enhancer import enhance_template_project


class WiringService:
    def __init__(
        self,
        aliases: Mapping[str, Sequence[str]] | None = None,
        id_factory: IdFactory = new_connection_id,
    ) -> None:
        self._aliases = aliases
        self._id_factory = id_factory

    def enhance(self, project: PluginProjectBase) -> PluginProjectBase:
        return enhance_template_project(project, id_factory=self._id_factory, aliases=self._aliases)

    def auto_connect(self, nodes: list[DSPNode]) -> AutoConnectResponse:
        return AutoConnectResponse(connections=auto_connect_nodes(nodes, id_factory=self._id_factory))

    def bind_parameters(self, request: ParameterBindingRequest) -> ParameterBindingResponse:
        components = map_ui_components_to_parameters(request.ui_components, request.nodes, aliases=self._aliases)
        return ParameterBindingResponse(
            ui_components=components,
            bound_count=sum(1 for component in components if component.parameter_id is not None),
        )

    def processing_order(self, graph: DSPGraph, strict: bool = False) -> ProcessingOrderResponse:
        if strict:
            try:
                ordered = get_strict_processing_order(graph.nodes, graph.connections)
            except GraphCycleError as error:
                raise HTTPException(status_code=422, detail={"diagnostics": error.diagnostics}) from error
        else:
            ordered = get_processing_order(graph.nodes, graph.connections)
        return ProcessingOrderResponse(order=[node.id for node in ordered], nodes=ordered)
