# backend/main.py
import logging
import time

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

load_dotenv()

from config import settings
from database import init_db
from utils.errors import register_exception_handlers
from utils.uploads import upload_dir

# Router imports
from routes.articles import router as articles_router
from routes.sales import router as sales_router
from routes.ai import router as ai_router
from routes.stats import router as stats_router
from routes.vinted import router as vinted_router
from routes.health import router as health_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("vinted_manager")

# Initialisation
init_db()

app = FastAPI(title="Vinted Manager API", version="1.0.0")
register_exception_handlers(app)

# Uploads - the directory must exist before StaticFiles is mounted
app.mount("/uploads", StaticFiles(directory=str(upload_dir())), name="uploads")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    if not request.url.path.startswith("/api"):
        return await call_next(request)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s in %.0fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


# Router registration
app.include_router(articles_router)
app.include_router(sales_router)
app.include_router(ai_router)
app.include_router(stats_router)
app.include_router(vinted_router)
app.include_router(health_router)


@app.get("/")
def read_root():
    return {"message": "Vinted Manager API is running"}
