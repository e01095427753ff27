from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response

router = APIRouter()


def _resolve_static(static_dir: str, path: str) -> Path:
    """Return the file to serve for `path`: the asset itself or the entry page."""
    root = Path(static_dir).resolve()
    if path:
        candidate = (root / path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return candidate
    return root / "index.html"


@router.get("/{path:path}", include_in_schema=False)
def static_fallback(request: Request, path: str) -> Response:
    target = _resolve_static(request.app.state.settings.static_dir, path)
    if not target.is_file():
        return PlainTextResponse("Not Found", status_code=404)
    return FileResponse(target)
