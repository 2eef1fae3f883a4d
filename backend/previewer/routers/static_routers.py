# backend/previewer/routers/static_routers.py
"""Static pages served alongside the API."""

from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from ..dependencies import SettingsDep

router = APIRouter(tags=["static"])

UPLOAD_TESTER_PAGE = "uploadTester.html"


@router.get("/uploadTester", response_class=FileResponse)
async def upload_tester(settings: SettingsDep):
    """Manual upload form for trying the preview endpoints in a browser."""
    page = Path(settings.static_directory) / UPLOAD_TESTER_PAGE
    if not page.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Upload tester not found"
        )
    return FileResponse(page, media_type="text/html")
