import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import models so they're registered with SQLAlchemy Base before create_all
from . import models  # noqa: F401
from .config import API_HOST, API_PORT, FRONTEND_URL, STORE_RETRY_AFTER_SECONDS
from .database import Base, engine
from .domain.scheduling.errors import SchedulingError, StoreUnavailable
from .domain.scheduling.router import router as appointments_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Clinic Scheduling API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError):
    """Render domain errors in the {success, message} envelope"""
    headers = None
    if isinstance(exc, StoreUnavailable):
        headers = {"Retry-After": str(STORE_RETRY_AFTER_SECONDS)}
        logger.error(f"❌ Store unavailable for {request.method} {request.url.path}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Invalid request.", "detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in exc.errors()]


app.include_router(appointments_router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}


def run():
    """Serve the API with uvicorn (installed as the `clinic-api` script)"""
    import uvicorn

    logger.info(f"🚀 Starting Clinic Scheduling API on {API_HOST}:{API_PORT}")
    uvicorn.run("clinic_app.main:app", host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run()
