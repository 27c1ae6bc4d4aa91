from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import init_db
from .logging_config import get_logger
from .routers import ai_search, employer, job_listings, seo

logger = get_logger(__name__)

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

# CORS
origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(job_listings.router)
app.include_router(employer.router)
app.include_router(ai_search.router)
app.include_router(seo.router)


@app.on_event("startup")
def _on_startup():
    # create tables on startup (development convenience). Use migrations for prod.
    init_db()
    logger.info("%s started env=%s", settings.APP_NAME, settings.APP_ENV)


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.APP_ENV}
