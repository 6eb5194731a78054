import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conduit.config import settings
from conduit.errors import ConduitError
from conduit.middleware import TimingMiddleware
from conduit.routers import articles, metrics, profiles, tags, users
from conduit.store import InMemoryStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Conduit API starting (env=%s)", settings.APP_ENV)
    yield
    # All state is process-lifetime only; report what is being discarded.
    logger.info("Conduit API stopping: %s", app.state.store.stats().model_dump())


async def conduit_error_handler(request: Request, exc: ConduitError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    """
    Build the application around *store* (a fresh one when omitted).

    Every handler reaches the store through the ``get_store`` dependency,
    so tests can build isolated apps side by side.
    """
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="Conduit API",
        description="Blogging platform backend over a concurrent in-memory store",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else InMemoryStore()

    app.add_exception_handler(ConduitError, conduit_error_handler)

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(users.router)
    app.include_router(profiles.router)
    app.include_router(articles.router)
    app.include_router(tags.router)
    app.include_router(metrics.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()
