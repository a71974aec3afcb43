from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.api import api_router
from app.core.config import settings
from app.core.error_handlers import register_error_handlers
from app.core.logging_config import configure_logging
from app.db.init_db import init_db

configure_logging()
settings.ensure_dirs()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title=f"{settings.PROJECT_NAME} Backend", version=settings.APP_VERSION, lifespan=lifespan)
register_error_handlers(app)

# CORS
# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router)
app.mount("/thumbnails", StaticFiles(directory=settings.thumbnails_dir), name="thumbnails")


@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API", "version": settings.APP_VERSION}
