from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from backend.app.models.plugin import PluginProjectBase


class TemplateCategory(StrEnum):
    SYNTH = "synth"
    EFFECT = "effect"
    UTILITY = "utility"
    DYNAMICS = "dynamics"
    MODULATION = "modulation"


class PluginTemplate(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: TemplateCategory
    description: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    project: PluginProjectBase


class TemplateListItem(BaseModel):
    id: str
    name: str
    category: TemplateCategory
    description: str
    tags: list[str]
