"""Curation endpoints: selection flags, uploaded documents and manual sources."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from research.contracts import Collection
from research.workspace import ResearchWorkspace
from server.dependencies import get_workspace
from server.schemas.requests import SelectionRequest, SourceRequest
from server.schemas.responses import WorkspaceDTO

router = APIRouter(prefix="/v1", tags=["Selection"])


def _entry_ref(collection: Collection, ref: str) -> int | str:
    # Results are addressed by position in the session; the rest by id
    if collection is Collection.RESULTS and ref.isdigit():
        return int(ref)
    return ref


@router.patch("/selection/{collection}/{ref}", response_model=WorkspaceDTO)
async def toggle_entry(
    collection: Collection,
    ref: str,
    request: SelectionRequest,
    workspace: ResearchWorkspace = Depends(get_workspace),
):
    try:
        workspace.store.toggle(collection, _entry_ref(collection, ref), request.included)
    except (IndexError, KeyError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e).strip("'\"")) from e
    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.post("/selection/{collection}/all", response_model=WorkspaceDTO)
async def select_all(
    collection: Collection,
    request: SelectionRequest,
    workspace: ResearchWorkspace = Depends(get_workspace),
):
    workspace.store.select_all(collection, request.included)
    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.post("/documents", response_model=WorkspaceDTO)
async def upload_documents(
    files: list[UploadFile] = File(...),
    workspace: ResearchWorkspace = Depends(get_workspace),
):
    """Attach user documents. Only filename and size enter the report request."""
    for upload in files:
        content = await upload.read()
        workspace.store.add_document(upload.filename or "untitled", len(content), file_handle=content)
    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.delete("/documents/{document_id}", response_model=WorkspaceDTO)
async def remove_document(document_id: str, workspace: ResearchWorkspace = Depends(get_workspace)):
    try:
        workspace.store.remove(Collection.DOCUMENTS, document_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e).strip("'\"")) from e
    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.post("/sources", response_model=WorkspaceDTO)
async def add_source(request: SourceRequest, workspace: ResearchWorkspace = Depends(get_workspace)):
    try:
        workspace.store.add_source(request.url, request.title)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return WorkspaceDTO.from_snapshot(workspace.snapshot())


@router.delete("/sources/{source_id}", response_model=WorkspaceDTO)
async def remove_source(source_id: str, workspace: ResearchWorkspace = Depends(get_workspace)):
    try:
        workspace.store.remove(Collection.SOURCES, source_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e).strip("'\"")) from e
    return WorkspaceDTO.from_snapshot(workspace.snapshot())
