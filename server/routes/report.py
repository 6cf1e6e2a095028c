"""Report generation and export endpoints."""

import asyncio
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from models.errors import ResearchError
from research.workspace import ResearchWorkspace
from server.dependencies import get_workspace
from server.schemas.responses import ReportDTO
from server.utils import to_http_exception
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Report"])


@router.post("/report", response_model=ReportDTO)
async def generate_report(workspace: ResearchWorkspace = Depends(get_workspace)):
    """
    Synthesize a report from the selected results, documents and sources.

    Returns 409 while another generation for the same session is running, or when
    a search replaced the session before the report was ready.
    """
    try:
        report = await asyncio.to_thread(workspace.generate_report)
    except ResearchError as e:
        logger.error(f"Report generation failed: {e}", extra={"extra_fields": {"error_type": type(e).__name__}})
        raise to_http_exception(e) from e

    if report is None:
        detail = (
            "Report generation already in progress"
            if workspace.report_in_progress
            else "A new search replaced the session; report discarded"
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return ReportDTO.from_report(report)


@router.get("/report/export")
async def export_report(
    format: Literal["pdf", "txt"] = Query("pdf"),
    workspace: ResearchWorkspace = Depends(get_workspace),
):
    try:
        artifact = await asyncio.to_thread(workspace.export_report, format)
    except ResearchError as e:
        raise to_http_exception(e) from e

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
