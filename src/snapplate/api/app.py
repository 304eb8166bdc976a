"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from snapplate.api.logs import router as logs_router
from snapplate.api.models import AnalyzeRequest, ModelsQuery
from snapplate.api.preferences import router as preferences_router
from snapplate.app_logging import configure_logging
from snapplate.containers import AppContainer
from snapplate.domain.errors import SnapplateError


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

    app.include_router(logs_router)
    app.include_router(preferences_router)

    @app.exception_handler(SnapplateError)
    async def snapplate_error_handler(
        request: Request, exc: SnapplateError
    ) -> JSONResponse:
        logger.warning(
            "Request failed: %s",
            exc.message,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            {"error": _format_validation_error(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/config")
    async def server_config(request: Request) -> dict[str, object]:
        """Describe the server provider configuration without the key."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.analysis_service.server_config()
        return {
            "has_server_key": snapshot.has_server_key,
            "server_provider": snapshot.server_provider,
            "server_model": snapshot.server_model,
            "server_custom_url": snapshot.server_custom_url,
        }

    @app.post("/api/analyze")
    async def analyze(body: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Analyze a food photo."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.analysis_service.analyze(
            body.image_base64, body.provider_request()
        )
        return result.model_dump(exclude_none=True)

    @app.get("/api/models")
    async def list_models(
        request: Request, query: ModelsQuery = Depends(_models_query)
    ) -> dict[str, object]:
        """List models usable for photo analysis."""
        state_container: AppContainer = request.app.state.container
        models = await state_container.analysis_service.list_models(
            query.provider_request()
        )
        return {"models": [{"id": model.id, "name": model.name} for model in models]}

    return app


def _format_validation_error(exc: RequestValidationError) -> str:
    """Return a short human-readable summary of a validation error."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location}: {message}" if location else message


def _models_query(request: Request) -> ModelsQuery:
    """Read listing parameters in either snake_case or camelCase."""
    try:
        return ModelsQuery.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc
