import logging

import httpx

from lead_funnel.config import settings
from lead_funnel.records.builder import serialize_session_record
from lead_funnel.shared.schemas import SessionRecord

logger = logging.getLogger(__name__)


async def send_registration(record: SessionRecord) -> bool:
    """
    Posts a submitted lead to the registration webhook.

    Returns True when the webhook accepted the record. Failures are logged
    and never raised: the lead is already stored in the session table.
    """
    if not settings.REGISTRATION_WEBHOOK_URL:
        logger.warning(
            f"REGISTRATION_WEBHOOK_URL is not configured; skipping webhook for session {record.sessionId}."
        )
        return False

    headers = {"Content-Type": "application/json"}
    async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT_SECONDS) as client:
        try:
            response = await client.post(
                settings.REGISTRATION_WEBHOOK_URL,
                content=serialize_session_record(record),
                headers=headers,
            )
            response.raise_for_status()
            logger.info(
                f"Registration webhook accepted session {record.sessionId} "
                f"(category={record.leadCategory.value if record.leadCategory else None})."
            )
            return True
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Registration webhook rejected session {record.sessionId}. Status: {e.response.status_code}, Response: {e.response.text}"
            )
        except httpx.RequestError as e:
            logger.error(
                f"Could not reach registration webhook for session {record.sessionId}: {e}"
            )
        except Exception as e:
            logger.error(
                f"An unexpected error occurred while sending session {record.sessionId} to the webhook: {e}",
                exc_info=True,
            )
    return False
