"""Document generation API route."""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Response, status

from docgen.api.deps import get_orchestrator, get_org_id
from docgen.api.schemas import ErrorResponse, GenerationRequest
from docgen.pipeline.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names also get an RFC 5987 form."""
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.post(
    "/generate",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def generate_document(
    request: GenerationRequest,
    org_id: str = Depends(get_org_id),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Generate a document from a template and data.

    Exactly one of ``template_id``, ``template`` and ``template_url`` selects
    the template. The response body is the generated document.

    Raises:
        GenerationError: Handled by the application's exception handler.
    """
    result = await orchestrator.generate(request, org_id)

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": content_disposition(result.filename)},
    )
