from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, Field, JsonValue, model_validator

NumericValue = int | float
ParameterValue = str | int | float | bool


class ParameterType(StrEnum):
    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    ENUM = "enum"


class DSPParameter(BaseModel):
    id: str = Field(min_length=1)
    name: str
    type: ParameterType = ParameterType.FLOAT
    min: NumericValue | None = None
    max: NumericValue | None = None
    default: ParameterValue | None = None
    value: ParameterValue | None = None
    unit: str | None = None
    options: list[str] | None = None


class DSPNode(BaseModel):
    id: str = Field(min_length=1)
    type: str = "custom"
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    parameters: list[DSPParameter] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)


class DSPConnection(BaseModel):
    # Node ids are intentionally unconstrained: blank ids are dropped during enhancement.
    id: str
    source_node_id: str
    source_port: str
    target_node_id: str
    target_port: str


class DSPGraph(BaseModel):
    nodes: list[DSPNode] = Field(default_factory=list)
    connections: list[DSPConnection] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_node_ids(self) -> "DSPGraph":
        ids = [node.id for node in self.nodes]
        if len(ids) != len(set(ids)):
            raise ValueError("Node IDs must be unique")
        return self


class ComponentStyle(BaseModel):
    background_color: str | None = None
    border_color: str | None = None
    border_width: float | None = None
    border_radius: float | None = None
    color: str | None = None
    font_size: float | None = None
    font_family: str | None = None


class UIComponent(BaseModel):
    id: str = Field(min_length=1)
    type: str = "knob"
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = Field(default=80.0, gt=0)
    height: float = Field(default=100.0, gt=0)
    properties: dict[str, JsonValue] = Field(default_factory=dict)
    style: ComponentStyle = Field(default_factory=ComponentStyle)
    parameter_id: str | None = None


class CodeFiles(BaseModel):
    dsp: str = ""
    ui: str = ""
    helpers: str = ""


class PluginSettings(BaseModel):
    width: int = Field(default=600, gt=0)
    height: int = Field(default=400, gt=0)
    resizable: bool = True
    background_color: str = "#2a2a2a"
    sample_rate: int = Field(default=44_100, gt=0)
    buffer_size: int = Field(default=512, gt=0)


class ProjectMetadata(BaseModel):
    version: str = "1.0.0"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    application: str = "pluginforge"
    is_template: bool = False
    file_path: str | None = None


class PluginProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    version: str = "1.0.0"
    description: str = Field(default="", max_length=2_048)
    author: str = ""
    ui_components: list[UIComponent] = Field(default_factory=list)
    dsp_graph: DSPGraph = Field(default_factory=DSPGraph)
    code: CodeFiles = Field(default_factory=CodeFiles)
    settings: PluginSettings = Field(default_factory=PluginSettings)
    metadata: ProjectMetadata | None = None


class PluginProject(PluginProjectBase):
    id: str = Field(default_factory=lambda: str(uuid4()))
