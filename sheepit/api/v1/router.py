"""Main router for API v1."""

from fastapi import APIRouter

from sheepit.api.v1 import auth, gallery, health, projects

router = APIRouter(prefix="/v1")

router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(gallery.router, prefix="/gallery", tags=["gallery"])
