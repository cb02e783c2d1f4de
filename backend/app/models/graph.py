from __future__ import annotations

from pydantic import BaseModel, Field

from backend.app.models.plugin import DSPConnection, DSPNode, UIComponent


class AutoConnectRequest(BaseModel):
    nodes: list[DSPNode] = Field(default_factory=list)


class AutoConnectResponse(BaseModel):
    connections: list[DSPConnection]


class ParameterBindingRequest(BaseModel):
    ui_components: list[UIComponent] = Field(default_factory=list)
    nodes: list[DSPNode] = Field(default_factory=list)


class ParameterBindingResponse(BaseModel):
    ui_components: list[UIComponent]
    bound_count: int


class ProcessingOrderResponse(BaseModel):
    order: list[str]
    nodes: list[DSPNode]
