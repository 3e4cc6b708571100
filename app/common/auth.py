import logging
from hmac import compare_digest
from typing import Optional

from fastapi import Header

from app.common.utils import get_bearer
from app.core.config import settings
from app.exceptions import AuthError, ConfigurationError

logger = logging.getLogger('iris.auth')


async def check_api_key(authorization: Optional[str] = Header(None)):
    """
    Dependency guarding every `/api/*` route: the caller must send `Authorization: Bearer <API_KEY>`.
    """
    if not settings.api_key:
        logger.error('API_KEY is not configured, refusing all /api requests')
        raise ConfigurationError('API_KEY is not configured')

    token = get_bearer(authorization)
    if token is None or not compare_digest(token.encode(), settings.api_key.encode()):
        raise AuthError()
