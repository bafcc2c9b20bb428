from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, text
import logging

from app.core.config import settings
from app.core.database import engine, async_session_maker, commit_or_fail
from app import models  # noqa: F401  (registers all tables on SQLModel.metadata)
from app.routers import items, orders, persons
from app.services.order_service import OrderService

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Check DB connectivity
    logger.info("Checking database connectivity...")
    try:
        async with engine.begin() as conn:
            # Verify we can ping the DB
            await conn.execute(text("SELECT 1"))
            # Auto-create tables (no migration tooling in this project)
            await conn.run_sync(SQLModel.metadata.create_all)
        # Seed the order number counter before serving requests
        async with async_session_maker() as session:
            await OrderService.ensure_number_sequence(session)
            await commit_or_fail(session, "initialize order number sequence")
        logger.info("Database connectivity verified.")
    except Exception as e:
        logger.error(f"DATABASE CONNECTION REFUSED: {str(e)}")
        # We want the app to fail if the DB is unreachable
        raise RuntimeError("Could not connect to database on startup.") from e

    yield

    logger.info("Shutting down application...")
    await engine.dispose()

app = FastAPI(
    title=settings.PROJECT_NAME,
    lifespan=lifespan
)

# Enable CORS for the browser front-end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RequestValidationError)
async def invalid_payload_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are reported as 400, not the default 422
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"Invalid payload on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": errors}
    )

@app.exception_handler(SQLAlchemyError)
async def store_failure_handler(request: Request, exc: SQLAlchemyError):
    # The cause goes to the log only; clients get a generic message
    logger.error(f"Unhandled database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal error while accessing the data store."}
    )

# Unified API Prefix: /api
app.include_router(persons.router, prefix="/api")
app.include_router(items.router, prefix="/api")
app.include_router(orders.router, prefix="/api")

@app.get("/health")
async def health_check():
    status = {"status": "ok", "project": settings.PROJECT_NAME}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        status["database"] = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        status["database"] = f"error: {e.__class__.__name__}"
        status["status"] = "degraded"
    return status

@app.get("/")
async def root():
    return {"message": "OrderDesk API is running", "docs": "/docs"}
