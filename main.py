from datetime import datetime, timezone
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from database import Base, engine, SessionLocal, get_settings
from api import games, players, teams
from core.roster_store import SqlRosterStore
from services.seed_service import seed_from_backup

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立資料庫表，資料庫為空時從備份匯入
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_from_backup(SqlRosterStore(db), settings.seed_backup_path)
    finally:
        db.close()

    yield


app = FastAPI(
    title="ImIn API",
    description="Pickup game coordination: create games, join by link, split balanced teams",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration（mobile app + web join page）
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(games.router)
app.include_router(players.router)
app.include_router(teams.router)


@app.get("/")
def root():
    return {"message": "ImIn API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
