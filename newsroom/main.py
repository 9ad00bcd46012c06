import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from newsroom.cache import cache
from newsroom.config import settings
from newsroom.exceptions import NewsroomError, ToggleConflictError
from newsroom.middleware import AccessLogMiddleware
from newsroom.routers import articles, bookmarks, comments, users

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await cache.connect()
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Newsroom API",
    description="News publishing API: articles, comments and bookmarks behind bearer-token access control",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

@app.exception_handler(NewsroomError)
async def newsroom_error_handler(request: Request, exc: NewsroomError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"error": "ValidationError", "message": problems or "Invalid request"},
    )


@app.exception_handler(ToggleConflictError)
@app.exception_handler(SQLAlchemyError)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "InternalError", "message": "The request could not be completed"},
    )


# Routers
app.include_router(articles.router)
app.include_router(comments.router)
app.include_router(bookmarks.router)
app.include_router(users.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
