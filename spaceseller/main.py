import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401 - register models with Base
from .database import Base, engine
from .domain.assignments.router import router as reliability_router
from .domain.orders.router import router as orders_router
from .domain.orders.wizard import WizardSessionStore
from .services.location import LocationValidator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


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

    app.state.wizard_sessions.start_sweeper()

    yield

    logger.info("Application shutting down...")
    # Stops the sweeper and every autosave loop still running
    await app.state.wizard_sessions.close_all()


app = FastAPI(title="SpaceSeller Orders API", version="1.0.0", lifespan=lifespan)
app.state.wizard_sessions = WizardSessionStore(location_validator=LocationValidator())

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(orders_router)
app.include_router(reliability_router)


@app.get("/")
def root():
    return {"message": "SpaceSeller Orders API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
