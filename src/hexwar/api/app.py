"""FastAPI application wiring for Hexwar."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hexwar import __version__
from hexwar.api import routes
from hexwar.api.runtime import ApiState, GameBusyError, build_state
from hexwar.config import get_settings
from hexwar.domain.combat import DiceRollerUnavailableError
from hexwar.repository import PersistenceUnavailableError

logger = logging.getLogger(__name__)


async def _service_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("%s %s unavailable: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


async def _game_busy(request: Request, exc: Exception) -> JSONResponse:
    logger.info("%s %s refused: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def create_app(*, state_factory: Callable[[], ApiState] = build_state) -> FastAPI:
    """Build the API with one live game service per application lifespan.

    A missing dice roller or an unreachable store answers 503 on any route.
    Replacing the game while an attack is resolving answers 409.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        app.state.api_state = state
        logger.info("hexwar API started (storage: %s)", state.settings.storage_backend)
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title="Hexwar API", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DiceRollerUnavailableError, _service_unavailable)
    app.add_exception_handler(PersistenceUnavailableError, _service_unavailable)
    app.add_exception_handler(GameBusyError, _game_busy)
    app.include_router(routes.router)
    return app
