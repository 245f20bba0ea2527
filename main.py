import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.database import init_db
from app.core.errors import RecyclingError, StoreUnavailable
from app.core.logging_config import setup_logging
from app.schemas.common.error_base import ErrorOut
from app.routes.auth.auth_routers import auth_router
from app.routes.user.user_routers import user_router
from app.routes.event.event_routers import event_router
from app.routes.material.material_routers import material_router
from app.routes.earnings.earnings_routers import earnings_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Recycle Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(event_router)
app.include_router(material_router)
app.include_router(earnings_router)


@app.exception_handler(RecyclingError)
async def recycling_error_handler(request: Request, exc: RecyclingError):
    if isinstance(exc, StoreUnavailable):
        logger.error("%s %s: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=ErrorOut(detail=exc.detail, code=exc.code).model_dump())


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return """
    <html>
        <head>
            <title>Recycle Tracker</title>
        </head>
        <body>
            <h1>Recycle Tracker API</h1>
            <p>See the API documentation <a href="/docs">here</a>.</p>
        </body>
    </html>
    """
