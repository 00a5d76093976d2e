"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from uuid import UUID

from fastapi import Depends, FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.responses import JSONResponse

from nutrition_ledger.api.dependencies import require_socket_user, require_user
from nutrition_ledger.api.meal_plans import router as meal_plans_router
from nutrition_ledger.api.models import TimezoneRequest
from nutrition_ledger.api.tracking import router as tracking_router
from nutrition_ledger.app_logging import configure_logging
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.errors import (
    LedgerError,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
)
from nutrition_ledger.serializers import event_to_dict

_ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UpstreamFailure: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(tracking_router)
    app.include_router(meal_plans_router)

    @app.exception_handler(LedgerError)
    async def ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
        status_code = next(
            (
                code
                for error_type, code in _ERROR_STATUS.items()
                if isinstance(exc, error_type)
            ),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/settings/timezone")
    async def get_timezone(
        request: Request, user_id: UUID = Depends(require_user)
    ) -> dict[str, str]:
        state_container: AppContainer = request.app.state.container
        return {
            "timezone": state_container.user_settings_service.get_timezone(user_id)
        }

    @app.put("/settings/timezone")
    async def set_timezone(
        body: TimezoneRequest, request: Request, user_id: UUID = Depends(require_user)
    ) -> dict[str, str]:
        """Change the timezone that defines the user's calendar days."""
        state_container: AppContainer = request.app.state.container
        state_container.user_settings_service.set_timezone(user_id, body.timezone)
        return {"timezone": body.timezone}

    @app.websocket("/ws/tracking")
    async def tracking_updates(
        websocket: WebSocket, user_id: UUID = Depends(require_socket_user)
    ) -> None:
        """Push the user's ledger events until the client disconnects."""
        state_container: AppContainer = websocket.app.state.container
        queue = state_container.broadcaster.subscribe(user_id)

        async def forward() -> None:
            while True:
                event = await queue.get()
                await websocket.send_json(event_to_dict(event))

        sender: asyncio.Task[None] | None = None
        try:
            await websocket.accept()
            sender = asyncio.create_task(forward())
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Tracking subscriber for user %s disconnected", user_id)
        finally:
            state_container.broadcaster.unsubscribe(user_id, queue)
            if sender is not None:
                sender.cancel()
                with suppress(asyncio.CancelledError):
                    try:
                        await sender
                    except Exception:
                        logger.exception(
                            "Tracking stream for user %s failed", user_id
                        )

    return app
