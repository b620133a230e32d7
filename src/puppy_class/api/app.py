"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from puppy_class.app_logging import configure_logging
from puppy_class.containers import AppContainer
from puppy_class.domain.push import PushSubscriptionRecord


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

    @app.get("/api/ping")
    async def ping() -> dict[str, object]:
        """Liveness probe used by clients to detect connectivity."""
        return {"ok": True, "ts": int(time.time() * 1000)}

    @app.get("/api/publicKey")
    async def public_key(request: Request) -> dict[str, str]:
        """Return the VAPID public key for push subscriptions."""
        state_container: AppContainer = request.app.state.container
        return {"publicKey": state_container.settings.vapid_public_key}

    @app.post("/api/subscriptions", response_model=None)
    async def save_subscription(request: Request) -> dict[str, bool] | JSONResponse:
        """Store a browser push subscription unless already known."""
        state_container: AppContainer = request.app.state.container
        try:
            body = await request.json()
            subscription = PushSubscriptionRecord.model_validate(body)
        except (ValueError, ValidationError):
            return JSONResponse(
                status_code=400, content={"error": "Invalid subscription"}
            )
        if not subscription.endpoint:
            return JSONResponse(
                status_code=400, content={"error": "Invalid subscription"}
            )
        state_container.push_service.subscribe(subscription)
        return {"success": True}

    @app.get("/api/sessions")
    async def list_sessions(request: Request) -> list[dict[str, object]]:
        """Return stored sessions, newest first."""
        state_container: AppContainer = request.app.state.container
        try:
            sessions = state_container.session_service.list_sessions()
        except Exception:
            logger.exception("Failed to list sessions")
            return []
        return [session.model_dump(by_alias=True) for session in sessions]

    @app.post("/api/sessions", response_model=None)
    async def create_session(  # noqa: PLR0913
        request: Request,
        id: str | None = Form(default=None),  # noqa: A002
        ts: str | None = Form(default=None),
        breed: str | None = Form(default=None),
        notes: str | None = Form(default=None),
        session_photo: UploadFile | None = File(default=None, alias="sessionPhoto"),
    ) -> dict[str, object] | JSONResponse:
        """Store an uploaded session and notify subscribers."""
        state_container: AppContainer = request.app.state.container
        if not id or session_photo is None:
            return JSONResponse(status_code=400, content={"success": False})
        try:
            photo = await session_photo.read()
            session = await state_container.session_service.create_session(
                session_id=id,
                ts=ts,
                breed=breed,
                notes=notes,
                photo_filename=session_photo.filename or f"{id}.png",
                photo=photo,
                photo_content_type=session_photo.content_type or "image/png",
            )
        except Exception:
            logger.exception("Failed to store session", extra={"session_id": id})
            return JSONResponse(status_code=500, content={"success": False})
        return {"success": True, "id": session.id}

    @app.get("/api/testPush")
    async def test_push(request: Request) -> dict[str, bool]:
        """Send a test notification to every subscriber."""
        state_container: AppContainer = request.app.state.container
        await state_container.push_service.send_to_all("Test push notification")
        return {"success": True}

    static_dir = container.settings.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app
