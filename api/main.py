import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from cats import router as cats_router
from core import db
from core.errors import ApiError
from core.responses import error_body
from users import router as users_router

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO")
logger = logging.getLogger(__name__)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:5173", "http://127.0.0.1:5173"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the browser client to call this API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed status=%s message=%s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.status_code))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    message = ", ".join(
        f"{err.get('msg')}: {'.'.join(str(p) for p in err.get('loc', ()))}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body(message, 400))


@app.exception_handler(Exception)
async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error")
    message = str(exc) or exc.__class__.__name__
    return JSONResponse(status_code=500, content=error_body(message, 500))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


app.include_router(auth_router.router, tags=["auth"])
app.include_router(cats_router.router, tags=["cats"])
app.include_router(users_router.router, tags=["users"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "cat api"}
