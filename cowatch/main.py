import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from cowatch.config import get_settings
from cowatch.routers import auth, videos
from cowatch.services.video_storage import get_video_storage

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # StorageInitError propagates and aborts startup
    storage = get_video_storage()
    logger.info("Video storage root: %s", storage.root)
    yield


app = FastAPI(title="CoWatch Video API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(videos.router)


@app.get("/")
def root():
    return {"message": "CoWatch Video API", "docs": "/docs"}


@app.get("/api/health")
def health():
    return {"status": "ok"}
