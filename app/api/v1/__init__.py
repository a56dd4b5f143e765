"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import analysis, auth, health, issues, projects, system

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
router.include_router(issues.router, prefix="/issues", tags=["issues"])
router.include_router(system.router, prefix="/system", tags=["system"])
