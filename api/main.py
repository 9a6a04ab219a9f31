# api/main.py

from dotenv import load_dotenv
from fastapi import FastAPI

from config.settings import AppConfig, LoggingConfig, TracingConfig
from core.code_exceptions import TracingError
from observability.logging import get_json_logger
from observability.tracing import TransactionMiddleware, configure_tracing, instrument_fastapi
from .routes import router

logger = get_json_logger(__name__)


def load_config() -> AppConfig:
    """Read configuration from the environment, running untraced if it is invalid."""
    try:
        return AppConfig.from_env()
    except TracingError as exc:
        logger.error("invalid tracing configuration, tracing disabled", extra={"error": str(exc)})
        return AppConfig(
            tracing=TracingConfig(enabled=False),
            logging=LoggingConfig.from_env(),
        )


load_dotenv()
config = load_config()
logger.setLevel(config.logging.level)

app = FastAPI(
    title="Simplified Tracing Demo",
    version="1.0.0",
    description="Request transactions and measured spans over OpenTelemetry + Phoenix",
    swagger_ui_parameters={
        "docExpansion": "list",
        "defaultModelsExpandDepth": 1,
    },
)
tracer_provider = configure_tracing(config.tracing)
instrument_fastapi(
    app,
    tracer_provider=tracer_provider,
    excluded_urls=config.tracing.excluded_urls,
)

logger.info("tracing configured", extra={"exporting": tracer_provider is not None})

app.add_middleware(TransactionMiddleware, excluded_paths=("/docs", "/openapi.json"))

app.include_router(router, prefix="/api")


@app.get("/")
def root():
    return {"message": "Simplified tracing demo is running"}


# For uvicorn:
# uvicorn api.main:app --reload
