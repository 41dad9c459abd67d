from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
import uvicorn

from log_insights.api import analytics, hosts, upload
from log_insights.config import configure_logging, settings
from log_insights.database import engine, init_db

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db(engine)
    yield

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Access log ingestion and rolling 1/7/30 day traffic reports",
    lifespan=lifespan
)

app.include_router(analytics.router)
app.include_router(hosts.router)
app.include_router(upload.router)

@app.get("/health")
def health():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

# ========== MAIN ENTRY POINT ==========

if __name__ == "__main__":
    uvicorn.run(
        "log_insights.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
