from fastapi import FastAPI
from fastapi.responses import Response

from shaderland.routers.health import router as health_router
from shaderland.routers.shaders import router as shaders_router
from shaderland.observability.metrics import router as metrics_router
from shaderland.observability.logger import configure_logging
from shaderland.utils.telemetry import init_otel
from shaderland.db.base import async_engine
from shaderland.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from shaderland import config

configure_logging(config)

app = FastAPI(
    title="Shaderland API",
    description="Generate, remix and browse WebGL shaders written by language models",
    version="1.0.0",
)

# Error handler should be outermost to catch all errors
app.add_middleware(ErrorHandlerMiddleware, debug=config.DEBUG)

setup_exception_handlers(app)

app.include_router(health_router)  # Health checks at root level
app.include_router(metrics_router)
app.include_router(shaders_router, prefix="/api")


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon to prevent 404 errors."""
    return Response(status_code=204)


if config.settings.OTEL_ENABLED:
    init_otel(app=app, engine=async_engine)


def get_app() -> FastAPI:
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("shaderland.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
