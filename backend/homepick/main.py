import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from homepick.config import settings
from homepick.database import init_db
from homepick.errors import CollaboratorUnavailableError
from homepick.api import auth, listings, maps, news, options

# Configure logging so all loggers output to console
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    stream=sys.stdout,
)
if settings.log_file:
    os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
    _file_handler = RotatingFileHandler(settings.log_file, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    _file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logging.getLogger().addHandler(_file_handler)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="HomePick",
    description="Korean real-estate listings - browse, filter and map listings; admin listing and news management",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(listings.router, prefix="/api/listings", tags=["Listings"])
app.include_router(news.router, prefix="/api/news", tags=["News"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(maps.router, prefix="/api/map", tags=["Map"])
app.include_router(options.router, prefix="/api/options", tags=["Options"])


@app.exception_handler(CollaboratorUnavailableError)
async def collaborator_unavailable_handler(request: Request, exc: CollaboratorUnavailableError):
    """Transient backend/map failures: show a dismissable notice, keep the app running."""
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc), "dismissable": True})


@app.on_event("startup")
async def startup_event():
    """Initialize database and seed sample news if enabled."""
    init_db()
    if settings.seed_sample_news:
        _seed_sample_news()


def _seed_sample_news():
    """If the news collection is empty, fill it with the sample articles."""
    from homepick.sample_news import SAMPLE_NEWS
    from homepick.services.document_store import get_store

    store = get_store()
    if store.list("news", None):
        return
    for article in SAMPLE_NEWS:
        store.create("news", article)
    logger.info(f"Seeded {len(SAMPLE_NEWS)} sample news articles")


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
