import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

from core.config import CORS_ORIGINS, DB_NAME, ENV, MONGO_URL, UPLOAD_DIR
from core.errors import register_exception_handlers
from core.logger import get_logger
from db import Database
from routers import router as api_router

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database(MONGO_URL, DB_NAME)
    try:
        await database.connect()
    except PyMongoError:
        logger.critical("Cannot reach MongoDB at startup, exiting")
        raise SystemExit(1)
    app.state.db = database
    logger.info("Fabric Shop API started (%s)", ENV)
    yield
    database.close()


app = FastAPI(
    title="Fabric Shop API",
    description="Catalog, cart and DIY design API for the fabric shop",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Access log: method, path, status and duration of every request
@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - t0) * 1000, 1)
    if request.method != "OPTIONS":
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration_ms)
    return response


register_exception_handlers(app)

os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    return {"success": True, "message": "Fabric Shop API is running"}
