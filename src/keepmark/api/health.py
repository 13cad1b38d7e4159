"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable. Open (no auth).
"""

from fastapi import APIRouter, Request
from sqlalchemy import text

from keepmark import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
