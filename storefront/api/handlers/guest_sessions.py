"""ゲストセッションAPI ハンドラー."""
import logging
from typing import Any

from storefront.api.auth import metadata_from_event
from storefront.api.dependencies import Dependencies
from storefront.api.response import guest_session_headers, internal_error_response, success_response

logger = logging.getLogger(__name__)


def create_guest_session(event: dict, context: Any) -> dict:
    """ゲストセッションを明示的に発行する.

    POST /sessions/guest

    Returns:
        発行したセッションのトークンと有効期限
    """
    store = Dependencies.get_guest_session_store()
    try:
        session = store.create(metadata_from_event(event))
    except Exception:
        logger.exception("Failed to create guest session")
        return internal_error_response(event=event)

    response_data = {
        "session_id": session.token.value,
        "session_type": "guest",
        "expires_at": session.expires_at.isoformat(),
        "device_type": session.metadata.device_type.value,
    }
    return success_response(
        response_data,
        status_code=201,
        event=event,
        headers=guest_session_headers(session),
    )
