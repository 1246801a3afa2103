"""churchreg FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from churchreg.api.clients import router as clients_router
from churchreg.api.health import router as health_router
from churchreg.auth.middleware import require_admin
from churchreg.config import settings
from churchreg.database import dispose_engine, init_db
from churchreg.errors import ClientRegistryError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.env in {"dev", "test"}:
        await init_db()
    if not settings.admin_api_key_hash:
        logger.warning("admin_api_key_hash is not set: client endpoints are unauthenticated")
    yield
    await dispose_engine()


app = FastAPI(
    title="churchreg - Church client registry",
    description="Registers church clients and provisions one database per client",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClientRegistryError)
async def client_registry_error_handler(request: Request, exc: ClientRegistryError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = sorted(
        {".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]) for err in exc.errors()}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": f"Invalid or missing fields: {', '.join(fields)}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error."},
    )


app.include_router(health_router, tags=["Health"])
app.include_router(
    clients_router,
    prefix="/v1",
    tags=["Clients"],
    dependencies=[Depends(require_admin)],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"service": "churchreg", "version": "0.1.0", "docs": "/docs"}
