"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """Return application and node catalog health status."""
    catalog_service = getattr(request.app.state, "catalog_service", None)
    if catalog_service is None or not catalog_service.is_loaded:
        return {"status": "error", "catalog": "not_loaded"}
    return {"status": "ok", "catalog": ",".join(catalog_service.languages)}
