"""Curriculum Manager - API v1 Router."""
from fastapi import APIRouter

from curriculum_manager.api.v1.curriculum import router as curriculum_router
from curriculum_manager.api.v1.reports import router as reports_router

api_router = APIRouter()

api_router.include_router(curriculum_router)
api_router.include_router(reports_router)
