"""Share link endpoints (owner management and public read)."""

from fastapi import APIRouter, Depends, Response, status
from structlog import get_logger

from app.api.deps import get_current_user
from app.models.interviews import (
    ShareLinkCreate,
    ShareLinkResponse,
    ShareLinksListResponse,
    SharedInterview,
    SharedInterviewResponse,
    SharedSummary,
)
from app.services import share_links as share_link_service
from app.services.auth import AuthenticatedUser

logger = get_logger()
router = APIRouter(tags=["share-links"])


@router.post(
    "/interviews/{interview_id}/share-links",
    response_model=ShareLinkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_share_link(
    interview_id: str,
    body: ShareLinkCreate | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
) -> ShareLinkResponse:
    """Create a time-bounded link to an owned interview."""
    body = body or ShareLinkCreate()
    link = await share_link_service.create_share_link(
        user.id,
        interview_id,
        expires_in_days=body.expires_in_days,
        permissions=body.permissions,
    )
    return ShareLinkResponse.model_validate(link)


@router.get("/interviews/{interview_id}/share-links", response_model=ShareLinksListResponse)
async def list_share_links(
    interview_id: str, user: AuthenticatedUser = Depends(get_current_user)
) -> ShareLinksListResponse:
    links = await share_link_service.list_share_links(user.id, interview_id)
    return ShareLinksListResponse(
        count=len(links), links=[ShareLinkResponse.model_validate(link) for link in links]
    )


@router.delete(
    "/interviews/{interview_id}/share-links/{link_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def revoke_share_link(
    interview_id: str,
    link_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
    await share_link_service.revoke_share_link(user.id, interview_id, link_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/shared/{access_token}", response_model=SharedInterviewResponse)
async def read_shared_interview(access_token: str) -> SharedInterviewResponse:
    """
    Public read through a share token. No bearer credential required.

    Unknown and expired tokens both return 404.
    """
    shared = await share_link_service.resolve_share_link(access_token)
    link = shared["link"]
    summary = shared["summary"]
    return SharedInterviewResponse(
        interview=SharedInterview.model_validate(shared["interview"]),
        summary=SharedSummary.model_validate(summary) if summary else None,
        permissions=link["permissions"],
        expires_at=link.get("expires_at"),
    )
