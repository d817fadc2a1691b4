"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewgate.config import Settings, settings
from reviewgate.errors import ReviewGateError
from reviewgate.routers import approvals, ws
from reviewgate.services.approval_store import ApprovalStore
from reviewgate.services.realtime_hub import RealtimeHub

# ── Logging setup ────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings
    log_level = config.log_level.upper()
    logging.getLogger("reviewgate").setLevel(log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        store = ApprovalStore(
            config.project_root,
            database_url=config.database_url or None,
            diff_context_lines=config.diff_context_lines,
            echo=(config.env == "development" and log_level == "DEBUG"),
        )
        await store.start()
        hub = RealtimeHub(store, queue_size=config.subscriber_queue_size)
        hub.start()
        app.state.store = store
        app.state.hub = hub
        logger.info("ReviewGate ready for project %s", store.project_root)

        yield

        # Shutdown
        hub.stop()
        await store.stop()

    app = FastAPI(
        title="ReviewGate",
        description="Human-in-the-loop approval workflow for agent-produced artifacts",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReviewGateError)
    async def handle_review_error(request: Request, exc: ReviewGateError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.kind},
        )

    # Mount routers
    app.include_router(approvals.router, prefix="/api/approvals", tags=["approvals"])
    app.include_router(ws.router, tags=["realtime"])

    @app.get("/health")
    async def health(request: Request):
        store: ApprovalStore = request.app.state.store
        hub: RealtimeHub = request.app.state.hub
        return {
            "status": "ok",
            "service": "reviewgate",
            "project_root": str(store.project_root),
            "subscribers": hub.subscriber_count,
        }

    return app


app = create_app()
