from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.app.api.deps import get_container
from backend.app.core.container import AppContainer
from backend.app.models.plugin import PluginProject
from backend.app.models.template import PluginTemplate, TemplateCategory, TemplateListItem

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[TemplateListItem])
async def list_templates(
    category: TemplateCategory | None = Query(default=None),
    container: AppContainer = Depends(get_container),
) -> list[TemplateListItem]:
    return container.template_service.list_templates(category)


@router.get("/categories", response_model=list[TemplateCategory])
async def list_categories(container: AppContainer = Depends(get_container)) -> list[TemplateCategory]:
    return container.template_service.categories()


@router.get("/search", response_model=list[TemplateListItem])
async def search_templates(
    q: str = Query(min_length=1),
    container: AppContainer = Depends(get_container),
) -> list[TemplateListItem]:
    return container.template_service.search_templates(q)


@router.get("/{template_id}", response_model=PluginTemplate)
async def get_template(template_id: str, container: AppContainer = Depends(get_container)) -> PluginTemplate:
    return container.template_service.get_template(template_id)


@router.post("/{template_id}/projects", response_model=PluginProject, status_code=201)
async def create_project_from_template(
    template_id: str,
    container: AppContainer = Depends(get_container),
) -> PluginProject:
    return container.template_service.create_project_from_template(template_id)
