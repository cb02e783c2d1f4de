from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.app.api.deps import get_container
from backend.app.core.container import AppContainer
from backend.app.models.graph import (
    AutoConnectRequest,
    AutoConnectResponse,
    ParameterBindingRequest,
    ParameterBindingResponse,
    ProcessingOrderResponse,
)
from backend.app.models.plugin import DSPGraph, PluginProjectBase

router = APIRouter(prefix="/graph", tags=["graph"])


@router.post("/enhance", response_model=PluginProjectBase)
async def enhance_project(
    project: PluginProjectBase,
    container: AppContainer = Depends(get_container),
) -> PluginProjectBase:
    return container.wiring_service.enhance(project)


@router.post("/auto-connect", response_model=AutoConnectResponse)
async def auto_connect(
    request: AutoConnectRequest,
    container: AppContainer = Depends(get_container),
) -> AutoConnectResponse:
    return container.wiring_service.auto_connect(request.nodes)


@router.post("/bind-parameters", response_model=ParameterBindingResponse)
async def bind_parameters(
    request: ParameterBindingRequest,
    container: AppContainer = Depends(get_container),
) -> ParameterBindingResponse:
    return container.wiring_service.bind_parameters(request)


@router.post("/processing-order", response_model=ProcessingOrderResponse)
async def processing_order(
    graph: DSPGraph,
    strict: bool = Query(default=False),
    container: AppContainer = Depends(get_container),
) -> ProcessingOrderResponse:
    return container.wiring_service.processing_order(graph, strict=strict)
