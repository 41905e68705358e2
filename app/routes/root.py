"""
TechNotes Backend — Root Pages and Not-Found Handling
=======================================================

What:  Serves the landing page and the negotiated 404 for unmatched routes.
How:   `/`, `/index` and `/index.html` return views/index.html. The 404
       representation follows the Accept header:
           HTML acceptable (or no Accept header) → views/404.html
           JSON acceptable                       → {"message": "Not found"}
           otherwise                             → text/plain "Not found"
Who:   The router is mounted in main.py; `not_found_response` is used by the
       HTTPException handler there.
"""

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response

PACKAGE_DIR = Path(__file__).resolve().parent.parent
VIEWS_DIR = PACKAGE_DIR / "views"
PUBLIC_DIR = PACKAGE_DIR / "public"

NOT_FOUND = "Not found"

router = APIRouter(tags=["Root"], include_in_schema=False)


@router.get("/")
@router.get("/index")
@router.get("/index.html")
async def index() -> FileResponse:
    return FileResponse(VIEWS_DIR / "index.html", media_type="text/html")


def _accepted_ranges(accept: Optional[str]) -> List[str]:
    """Media ranges from an Accept header, minus any refused with q=0."""
    ranges = []
    for part in (accept or "").split(","):
        media, *params = [piece.strip() for piece in part.split(";")]
        if not media:
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            ranges.append(media.lower())
    return ranges


def _accepts(ranges: List[str], media_type: str) -> bool:
    major = media_type.split("/", 1)[0]
    return any(r in ("*/*", f"{major}/*", media_type) for r in ranges)


def preferred_representation(accept: Optional[str]) -> str:
    """Return "html", "json" or "text", checked in that order."""
    if not accept or not accept.strip():
        return "html"
    ranges = _accepted_ranges(accept)
    if _accepts(ranges, "text/html"):
        return "html"
    if _accepts(ranges, "application/json"):
        return "json"
    return "text"


def not_found_response(request: Request) -> Response:
    representation = preferred_representation(request.headers.get("accept"))
    if representation == "html":
        return FileResponse(VIEWS_DIR / "404.html", status_code=404, media_type="text/html")
    if representation == "json":
        return JSONResponse(status_code=404, content={"message": NOT_FOUND})
    return PlainTextResponse(NOT_FOUND, status_code=404)
