from fastapi import APIRouter
from app.api.endpoints import comments, projects, status

api_router = APIRouter()
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
api_router.include_router(status.router, tags=["status"])
