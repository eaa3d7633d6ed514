import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from season_engine import __version__
from season_engine.database import init_db
from season_engine.routes import matches, seasons

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Season Engine API", version=__version__)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Schedule generation, standings, seeding, season match listing/import
app.include_router(seasons.router, prefix="/api", tags=["seasons"])
# Result recording
app.include_router(matches.router, prefix="/api", tags=["matches"])


@app.on_event("startup")
def on_startup():
    init_db()
    route_count = sum(1 for r in app.routes if getattr(r, "path", None))
    logger.info("Season Engine API %s started with %s routes", __version__, route_count)


@app.get("/api/health")
def health_check():
    return {"app_name": "Season Engine API", "version": __version__, "status": "healthy"}
