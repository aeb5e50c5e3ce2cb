"""Template management API routes.

Handles template listing, upload, deletion and validate-only checks.
"""

import logging
from pathlib import PurePath

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status

from docgen.api.deps import get_orchestrator, get_org_id
from docgen.api.schemas import (
    ErrorResponse,
    TemplateListItem,
    ValidateTemplateRequest,
    ValidateTemplateResponse,
)
from docgen.pipeline.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=list[TemplateListItem], response_model_by_alias=True)
async def list_templates(
    org_id: str = Depends(get_org_id),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> list[TemplateListItem]:
    """List stored templates with the fields each one requires.

    Args:
        org_id: Organization ID from X-Org-ID header.
        orchestrator: Generation orchestrator.

    Returns:
        One entry per stored template.
    """
    summaries = await orchestrator.list_templates(org_id)
    logger.info(f"Listed {len(summaries)} templates for org: {org_id}")
    return [TemplateListItem.from_summary(s) for s in summaries]


@router.post(
    "",
    response_model=TemplateListItem,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
)
async def upload_template(
    file: UploadFile,
    org_id: str = Depends(get_org_id),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> TemplateListItem:
    """Upload a Word template.

    The container is validated before it is stored; the response lists the
    fields the template requires.

    Raises:
        HTTPException: If the file is not a .docx file.
        GenerationError: If the container is invalid.
    """
    filename = PurePath(file.filename or "").name
    if not filename.lower().endswith(".docx"):
        logger.warning(f"Rejected template upload with unsupported name: {file.filename}")
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only .docx files are supported",
        )

    content = await file.read()
    summary = await orchestrator.store_template(org_id, filename, content)
    logger.info(f"Uploaded template {summary.id} for org: {org_id}")
    return TemplateListItem.from_summary(summary)


@router.post(
    "/validate",
    response_model=ValidateTemplateResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def validate_template(
    request: ValidateTemplateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> ValidateTemplateResponse:
    """Validate inline template content without rendering it.

    An invalid template is still a successful response with ``valid`` set
    to false; only a malformed request is an error.
    """
    report = orchestrator.validate_template(request.content, request.data)
    return ValidateTemplateResponse.from_report(report)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_template(
    template_id: str,
    org_id: str = Depends(get_org_id),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Delete a stored template."""
    await orchestrator.delete_template(org_id, template_id)
    logger.info(f"Deleted template {template_id} for org: {org_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
