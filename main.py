import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import ensure_indexes, get_db
from errors import install_error_handlers
from settings import settings
from user_routes import router as user_router

logger = logging.getLogger(__name__)


def setup_logging(level: str = settings.log_level) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    ensure_indexes(get_db())
    logger.info("Server is running on port %s", settings.port)
    yield


app = FastAPI(title="PlayApp", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# Ensure the public and upload temp directories exist
os.makedirs(settings.public_dir, exist_ok=True)
os.makedirs(settings.upload_temp_dir, exist_ok=True)
app.mount("/static", StaticFiles(directory=settings.public_dir), name="static")

app.include_router(user_router)


# -------------------- Basic Routes --------------------
@app.get("/")
def read_root():
    return {"message": "PlayApp backend is running"}


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    info = {
        "backend": "running",
        "database_connected": False,
        "collections": [],
    }
    try:
        info["collections"] = db.list_collection_names()
        info["database_connected"] = True
    except PyMongoError as e:
        info["error"] = str(e)
    return info


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
