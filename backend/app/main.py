from __future__ import annotations

import argparse
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import graph, templates
from backend.app.core.config import Settings, get_settings
from backend.app.core.container import AppContainer
from backend.app.core.logging import configure_logging
from backend.app.services.parameter_binding import DEFAULT_PARAMETER_ALIASES
from backend.app.services.template_service import TemplateService
from backend.app.services.wiring_service import WiringService


def _build_container(settings: Settings) -> AppContainer:
    aliases = DEFAULT_PARAMETER_ALIASES if settings.parameter_aliases_enabled else None

    return AppContainer(
        settings=settings,
        template_service=TemplateService(aliases=aliases),
        wiring_service=WiringService(aliases=aliases),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.debug)

    app.state.container = _build_container(settings)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(templates.router, prefix=settings.api_prefix)
    app.include_router(graph.router, prefix=settings.api_prefix)

    @app.get("/api/health")
    async def health() -> dict[str, str | bool]:
        return {
            "status": "ok",
            "version": settings.app_version,
            "parameter_aliases_enabled": settings.parameter_aliases_enabled,
        }

    return app


app = create_app()


def run() -> None:
    parser = argparse.ArgumentParser(description="Run the PluginForge template backend")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="info")
    parser.add_argument("--reload", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument(
        "--parameter-aliases",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Match widget parameters through the synonym table as well as by name.",
    )
    args = parser.parse_args()

    if args.debug is not None:
        os.environ["PLUGINFORGE_DEBUG"] = "1" if args.debug else "0"
    if args.parameter_aliases is not None:
        os.environ["PLUGINFORGE_PARAMETER_ALIASES_ENABLED"] = "1" if args.parameter_aliases else "0"

    get_settings.cache_clear()
    globals()["app"] = create_app()

    uvicorn.run(
        "backend.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    run()
