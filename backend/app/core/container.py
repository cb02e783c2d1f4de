from __future__ import annotations

from dataclasses import dataclass

from backend.app.core.config import Settings
from backend.app.services.template_service import TemplateService
from backend.app.services.wiring_service import WiringService


@dataclass(slots=True)
class AppContainer:
    settings: Settings
    template_service: TemplateService
    wiring_service: WiringService
