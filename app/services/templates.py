"""Summary template lookup for the analysis prompt."""

from __future__ import annotations

from typing import cast

from structlog import get_logger

from app.core.database import db
from app.services.interviews import is_valid_uuid
from app.types.database import SummaryTemplateRecordTD

logger = get_logger()


async def get_template_for_owner(template_id: str, user_id: str) -> SummaryTemplateRecordTD | None:
    """
    Fetch a template owned by ``user_id``.

    Args:
        template_id: Template UUID (may be malformed)
        user_id: Caller's user id

    Returns:
        Template record, or None when missing, foreign or malformed
    """
    if not is_valid_uuid(template_id):
        logger.warning("template_id_malformed", template_id=template_id)
        return None

    row = await db.fetchrow(
        """
        SELECT id, name, template_content
        FROM summary_templates
        WHERE id = $1 AND user_id = $2
        """,
        template_id,
        user_id,
    )

    if not row:
        logger.warning("template_not_found_for_owner", template_id=template_id, user_id=user_id)
        return None

    return cast(SummaryTemplateRecordTD, dict(row))
