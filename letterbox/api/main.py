import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from letterbox import __version__
from letterbox.api.errors import register_exception_handlers
from letterbox.api.routes import health, newsletters, subscriptions
from letterbox.app_shell.context import AppContext
from letterbox.config.loader import load_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the context from config unless one was injected (fail-fast)."""
    owned: AppContext | None = None
    if app.state.context is None:
        logging.basicConfig(level=logging.INFO)
        try:
            owned = AppContext.create(load_config())
        except Exception:
            logger.critical("Startup failed", exc_info=True)
            raise
        app.state.context = owned

    yield

    if owned is not None:
        owned.close()
        app.state.context = None


def create_app(context: AppContext | None = None) -> FastAPI:
    app = FastAPI(
        title="letterbox",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.context = context

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(subscriptions.router, tags=["Subscriptions"])
    app.include_router(newsletters.router, tags=["Newsletters"])
    return app


app = create_app()
