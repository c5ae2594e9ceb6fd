# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chat_relay.logging import logger
from chat_relay.routing import collect_subrouters
from chat_relay.settings import app_settings

__version__ = "1.0.0"


async def startup() -> None:
    """
    Application startup handler.

    Warns when no AI credential is configured and publishes the app_info
    metric.
    """
    from chat_relay.managers.ai_responder import ai_responder
    from chat_relay.utils.metrics import app_info

    logger.info("Application startup initiated")
    if not ai_responder.is_configured:
        logger.warning(
            "Starting without GOOGLE_API_KEY, bot replies will use the fallback text"
        )

    app_info.labels(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app_settings.ENV.value,
    ).set(1)
    logger.info("Initialized Prometheus metrics")


async def shutdown() -> None:
    """
    Application shutdown handler.

    Releases the AI provider HTTP client.
    """
    from chat_relay.managers.ai_responder import ai_responder

    logger.info("Application shutdown initiated")
    try:
        await ai_responder.aclose()
    except Exception as ex:
        logger.error(f"Error closing AI responder client: {ex}")
    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup()
    yield
    await shutdown()


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Installs the startup/shutdown lifespan and includes the routers
    collected by `chat_relay.routing.collect_subrouters()`:
    - `GET /health` and `GET /metrics`
    - the chat WebSocket at `/ws`
    """
    app = FastAPI(
        title="Chat relay",
        description="WebSocket chat relay with AI replies",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(collect_subrouters())

    return app
