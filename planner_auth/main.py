"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planner_auth.api.v1 import router as v1_router
from planner_auth.core.config import Settings, get_settings
from planner_auth.core.cookies import CookieCodec
from planner_auth.core.security import Clock, TokenCodec, utc_now
from planner_auth.middleware import (
    AuthenticationMiddleware,
    CredentialExtractor,
    install_error_translation,
)
from planner_auth.services.notifications import EmailNotifier, NotificationDispatcher, Notifier

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Build the application. Middleware order, outermost first:
    CORS, error translation, token authentication, then routing.
    """
    settings = settings or get_settings()
    dispatcher: NotificationDispatcher | None = None
    if notifier is None:
        dispatcher = NotificationDispatcher(max_workers=settings.NOTIFY_MAX_WORKERS)
        notifier = EmailNotifier(settings, dispatcher)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)

    app = FastAPI(
        title="Planner Auth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    token_codec = TokenCodec.from_settings(settings, clock=clock)
    cookie_codec = CookieCodec.from_settings(settings)
    app.state.settings = settings
    app.state.token_codec = token_codec
    app.state.cookie_codec = cookie_codec
    app.state.notifier = notifier

    # Added first so it runs innermost: the error translator must enclose it.
    app.add_middleware(
        AuthenticationMiddleware,
        token_codec=token_codec,
        extractor=CredentialExtractor(
            cookie_codec,
            public_routes=settings.PUBLIC_ROUTES,
            bearer_token_routes=settings.BEARER_TOKEN_ROUTES,
        ),
    )
    install_error_translation(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/index")
    def index() -> dict[str, str]:
        """Landing route; minimal payload for discovery."""
        return {"message": "Planner Auth API"}

    return app


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


_configure_logging(get_settings())
app = create_app()
