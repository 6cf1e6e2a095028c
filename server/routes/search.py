"""Search submission and session state endpoints."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, status

from models.errors import ResearchError
from research.workspace import ResearchWorkspace
from server.dependencies import get_workspace
from server.schemas.requests import SearchRequest
from server.schemas.responses import WorkspaceDTO
from server.utils import to_http_exception
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post("/search", response_model=WorkspaceDTO)
async def search(
    request: SearchRequest,
    workspace: ResearchWorkspace = Depends(get_workspace),
):
    """
    Refine the query, fetch results and replace the current session.

    Uploaded documents and manual sources are kept; result selections reset.
    """
    try:
        # Blocking HTTP calls run off the event loop
        await asyncio.to_thread(workspace.run_search, request.query, request.max_results)
    except ResearchError as e:
        logger.error(f"Search failed: {e}", extra={"extra_fields": {"error_type": type(e).__name__}})
        raise to_http_exception(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.get("/session", response_model=WorkspaceDTO)
async def get_session(workspace: ResearchWorkspace = Depends(get_workspace)):
    return WorkspaceDTO.from_snapshot(workspace.snapshot())
