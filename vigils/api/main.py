"""
Vigil finder HTTP API.

Users post vigils and search for vigils near a zipcode; every mutation is
replicated to the configured storage endpoints.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .admin import router as admin_router
from .dependencies import get_state
from .schemas import (
    CreateVigilRequest,
    CreateVigilResponse,
    HealthResponse,
    VigilCountResponse,
    VigilDumpResponse,
    VigilResponse,
    VigilSearchResponse,
)
from ..core import config
from ..core.geocoder import GeocodingError, is_valid_zipcode
from ..core.replication import sync_succeeded
from ..core.schema import succeeded
from ..core.search_service import InvalidZipcodeError, find_near
from ..core.state import AppState, build_state
from util.logging import logger


def create_app(state: AppState = None, bootstrap: bool = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        state: Pre-built state (tests inject fakes here); built from config when omitted.
        bootstrap: Whether to bootstrap replication and hydrate the store on startup.
    """
    if bootstrap is None:
        bootstrap = config.BOOTSTRAP_ON_STARTUP

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.vigils is None:
            app.state.vigils = build_state()
        if bootstrap:
            app.state.vigils.startup()
        logger.info(f"Remote identity: {app.state.vigils.replicator.remote_identity}")
        logger.info(f"Current vigils: {app.state.vigils.store.count()}")
        yield

    app = FastAPI(
        title="Vigil Finder API",
        version=config.VERSION,
        description="Post and discover vigils near a zipcode",
        docs_url="/docs" if config.debug_enabled() else None,
        redoc_url="/redoc" if config.debug_enabled() else None,
        lifespan=lifespan,
    )
    app.state.vigils = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})

    register_routes(app)
    app.include_router(admin_router)

    static_dir = Path(config.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    return app


def register_routes(app: FastAPI):
    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(state: AppState = Depends(get_state)):
        """Check service health."""
        info = state.describe()
        return HealthResponse(
            status="healthy" if state.replicator.has_identity else "degraded",
            version=config.VERSION,
            totalVigils=info["totalVigils"],
            remoteIdentity=info["remoteIdentity"],
            endpoints=info["endpoints"],
        )

    @app.get("/api/zipcode-info/{zipcode}")
    def zipcode_info(zipcode: str, state: AppState = Depends(get_state)):
        """Proxy the zipcode lookup for the browser client."""
        if not is_valid_zipcode(zipcode):
            raise HTTPException(status_code=400, detail="Invalid zipcode format")

        try:
            return state.zipcode_client.fetch_place_info(zipcode)
        except GeocodingError as e:
            logger.error(f"Error fetching zipcode info: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch zipcode info")

    @app.post("/api/bdo/create", response_model=CreateVigilResponse)
    def create_vigil(req: CreateVigilRequest, state: AppState = Depends(get_state)):
        """Create a vigil and push the snapshot to every endpoint."""
        record = state.store.create(req.data.model_dump())

        outcomes = state.replicator.replicate(state.store)
        if not sync_succeeded(outcomes):
            raise HTTPException(
                status_code=500,
                detail={
                    "error": "Failed to sync to any storage endpoint",
                    "details": [outcome.to_dict() for outcome in outcomes],
                },
            )

        return CreateVigilResponse(
            uuid=record.uuid,
            vigil=record.to_dict(),
            syncedTo=[outcome.server for outcome in succeeded(outcomes)],
            totalVigils=state.store.metadata.total_vigils,
        )

    @app.get("/api/bdo/{uuid}", response_model=VigilResponse)
    def get_vigil(uuid: str, state: AppState = Depends(get_state)):
        record = state.store.get(uuid)
        if record is None:
            raise HTTPException(status_code=404, detail="Vigil not found")
        return VigilResponse(uuid=uuid, data=record.to_dict())

    # Define /api/vigils-count and /api/vigils before /api/vigils/{zipcode}
    @app.get("/api/vigils-count", response_model=VigilCountResponse)
    def vigil_counts(state: AppState = Depends(get_state)):
        return VigilCountResponse(total=state.store.count(), today=state.store.count_today())

    @app.get("/api/vigils", response_model=VigilDumpResponse)
    def all_vigils(state: AppState = Depends(get_state)):
        """Full dump for debugging and admin use."""
        return VigilDumpResponse(
            vigils=[record.to_dict() for record in state.store.list_all()],
            metadata=state.store.metadata.to_dict(),
            bdoUserUUID=state.replicator.remote_identity,
        )

    @app.get("/api/vigils/{zipcode}", response_model=VigilSearchResponse)
    def vigils_near(zipcode: str, state: AppState = Depends(get_state)):
        """Vigils within the search radius, nearest first."""
        radius = state.search_radius_miles
        try:
            ranked = find_near(zipcode, state.store, state.resolver, radius)
        except InvalidZipcodeError as e:
            raise HTTPException(status_code=400, detail=f"Invalid zipcode or coordinates not found: {e}")

        return VigilSearchResponse(
            zipcode=zipcode,
            searchRadius=int(radius) if float(radius).is_integer() else radius,
            vigils=[match.to_dict() for match in ranked],
            count=len(ranked),
        )

    @app.get("/", include_in_schema=False)
    def index():
        index_file = Path(config.STATIC_DIR) / "index.html"
        if not index_file.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(index_file)


app = create_app()
