"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from image_catalog.app_logging import configure_logging
from image_catalog.containers import AppContainer
from image_catalog.domain.errors import ContributionError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/contribute")
    async def contribute(request: Request) -> JSONResponse:
        """Ingest a generated image into the shared catalog."""
        state_container: AppContainer = request.app.state.container
        payload = await _read_json(request)
        try:
            result = await state_container.contribution_service.contribute(
                payload,
                cookie_header=request.headers.get("cookie"),
                authorization_header=request.headers.get("authorization"),
            )
        except ContributionError as exc:
            if exc.status_code >= 500:
                logger.error(
                    "Contribution failed",
                    extra={"status_code": exc.status_code, "error": exc.message},
                )
            else:
                logger.warning(
                    "Contribution rejected",
                    extra={"status_code": exc.status_code, "error": exc.message},
                )
            return JSONResponse(
                status_code=exc.status_code, content={"error": exc.message}
            )
        except Exception as exc:
            logger.exception("Unexpected contribution error")
            return JSONResponse(
                status_code=500, content={"error": str(exc) or "contribute failed"}
            )
        return JSONResponse(content={"success": True, "imageUrl": result.image_url})

    return app


async def _read_json(request: Request) -> object:
    """Return the parsed JSON body, or None when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None
