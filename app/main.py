from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.responses import fail
from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import BillingError
from app.core.logging_config import configure_logging, get_logger
from app.db.session import get_store
from app.services.categories import CategoryService

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    CategoryService(get_store()).seed_defaults()
    logger.info("startup", extra={"storage": settings.STORAGE_BACKEND, "version": settings.VERSION})
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    if exc.status_code >= 500:
        logger.error("request_failed", extra={"path": request.url.path, "code": exc.code, "error": exc.message})
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message, code=exc.code))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{location}: {first.get('msg')}" if location else (first.get("msg") or "Invalid request")
    return JSONResponse(status_code=400, content=fail(message, errors=errors))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", extra={"path": request.url.path}, exc_info=exc)
    return JSONResponse(status_code=500, content=fail("Internal server error"))


# Include API routes
app.include_router(api_router, prefix=settings.API_V1_STR)
