"""FastAPI dependencies for authentication and workspace access."""

import os

from fastapi import Depends, Header, HTTPException, Request, status

from research.session_state import DEFAULT_SESSION_ID, WorkspaceRegistry
from research.workspace import ResearchWorkspace
from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)


async def get_api_key(request: Request, x_api_key: str | None = Header(None)):
    """
    Validate the X-API-Key header when API_KEYS is configured.

    With API_KEYS unset the server is open, which is the local single-user setup.
    """
    valid_keys_str = os.getenv("API_KEYS", "")
    if not valid_keys_str:
        return None

    valid_keys = [k.strip() for k in valid_keys_str.split(",") if k.strip()]
    if not x_api_key or x_api_key not in valid_keys:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(
            "API authentication failed",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "headers": redact_sensitive_headers(dict(request.headers)),
                }
            },
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key"
        )

    return x_api_key


def get_registry() -> WorkspaceRegistry:
    """Dependency to get the workspace registry (singleton pattern)."""
    from research.factory import create_registry_from_env

    if not hasattr(get_registry, "_instance"):
        get_registry._instance = create_registry_from_env()
    return get_registry._instance


def get_workspace(
    x_session_id: str | None = Header(None),
    registry: WorkspaceRegistry = Depends(get_registry),
    api_key: str | None = Depends(get_api_key),
) -> ResearchWorkspace:
    """Resolve the caller's workspace from the X-Session-ID header."""
    return registry.get((x_session_id or "").strip() or DEFAULT_SESSION_ID)
