"""Public gallery of live projects."""

from fastapi import APIRouter
from pydantic import BaseModel

from sheepit.api.deps import StoreDep
from sheepit.models.project import GalleryProject

router = APIRouter()


class GalleryResponse(BaseModel):
    projects: list[GalleryProject]


@router.get("", response_model=GalleryResponse, summary="List public live projects")
async def list_gallery(store: StoreDep) -> GalleryResponse:
    return GalleryResponse(projects=await store.list_public_live_projects())
