import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from config import settings
from core.errors import CollaboratorUnavailable, GeneratorQuotaExceeded, InvalidInput
from services import db
from api.v1.router import api_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
_LOG = logging.getLogger("vita")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.db = await db.connect(
        settings.database_url,
        retries=settings.db_connect_retries,
        create_tables=settings.db_create_tables,
    )
    if not app.state.db.connected:
        _LOG.warning("starting without a database: %s", app.state.db.last_error)
    yield
    app.state.db = await db.disconnect(app.state.db)


app = FastAPI(title="Vita Health API", version="1.0.0", lifespan=lifespan)

# CORS (development default – lock down in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


# ───────── error taxonomy → HTTP ─────────────────────────────────────
@app.exception_handler(InvalidInput)
async def _invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(GeneratorQuotaExceeded)
async def _quota(request: Request, exc: GeneratorQuotaExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)},
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(CollaboratorUnavailable)
async def _unavailable(request: Request, exc: CollaboratorUnavailable) -> JSONResponse:
    _LOG.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc)},
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.get("/health", tags=["meta"])
async def health(request: Request) -> dict[str, str]:
    state = getattr(request.app.state, "db", None)
    up = state is not None and await db.ping(state)
    return {"status": "ok", "env": settings.env_name, "database": "up" if up else "down"}
