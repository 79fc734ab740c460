"""Main FastAPI application for the FitCoach workout service."""
from fastapi import FastAPI, Request

from fitcoach.api.routes.profile import router as profile_router
from fitcoach.api.routes.workouts import router as workouts_router
from fitcoach.core.config import settings
from fitcoach.core.logging import configure_logging
from fitcoach.core.middleware import RequestContextMiddleware
from fitcoach.observability.client import init_opik
from fitcoach.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestContextMiddleware)
app.include_router(profile_router)
app.include_router(workouts_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
