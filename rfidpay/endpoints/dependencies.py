"""Shared endpoint dependencies."""
import logging
import secrets
from typing import Optional

from fastapi import Header, Request

from rfidpay.exceptions.api_exception import AuthError
from rfidpay.services.scan_state_service import ScanStateTracker
from rfidpay.settings import settings

logger = logging.getLogger(__name__)


def get_scan_tracker(request: Request) -> ScanStateTracker:
    """The application's last-scan slot."""
    return request.app.state.scan_tracker


async def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Reject hardware calls without the shared key."""
    if settings.API_KEY is None:
        logger.warning("API_KEY is not configured; rejecting hardware request")
        raise AuthError()

    expected = settings.API_KEY.get_secret_value()
    if x_api_key is None or not secrets.compare_digest(x_api_key, expected):
        raise AuthError()
