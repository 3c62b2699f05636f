from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hopecare.config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL
from hopecare.core.errors import error_message
from hopecare.routers import storage as storage_router
from hopecare.storage import selection

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report which storage backend this process is bound to."""
    if selection.fell_back:
        logger.warning(
            "Storage backend fell back to %s: %s",
            selection.backend.provider_name,
            error_message(selection.reason),
        )
    else:
        logger.info("Storage backend: %s", selection.backend.provider_name)
    yield


app = FastAPI(
    title=f"{APP_NAME} Storage API",
    description="Media storage for the HopeCare nonprofit platform",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(storage_router.router)


@app.get("/")
async def root():
    return {"message": f"{APP_NAME} Storage API", "version": APP_VERSION}
