"""API authentication using API keys

Clients send ``Authorization: Bearer <key>``. Each key is bound to one user
id; user-scoped routes only accept the user id their key is bound to.
"""
import os
import logging
from typing import Optional
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 by verify_api_key
security = HTTPBearer(auto_error=False)


def get_api_keys() -> dict[str, str]:
    """
    Load API keys from the API_KEYS environment variable

    Entries are comma-separated ``key:user_id`` pairs. Entries without a
    user id are ignored.
    """
    api_keys_str = os.getenv("API_KEYS", "")
    if not api_keys_str:
        logger.warning("No API_KEYS configured in environment")
        return {}

    keys = {}
    for entry in api_keys_str.split(","):
        key, _, user_id = entry.strip().partition(":")
        key, user_id = key.strip(), user_id.strip()
        if not key:
            continue
        if not user_id:
            logger.warning(f"Ignoring API key without a bound user id: {key[:10]}...")
            continue
        keys[key] = user_id
    return keys


async def verify_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """
    Verify API key from Authorization header

    Returns:
        The user id the key is bound to

    Raises:
        HTTPException: 503 if no keys are configured
        AuthenticationError: missing or unknown key
    """
    valid_keys = get_api_keys()

    if not valid_keys:
        logger.error("No API keys configured - rejecting all requests")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API authentication not configured"
        )

    if credentials is None:
        raise AuthenticationError("Missing bearer token", operation="verify_api_key")

    api_key = credentials.credentials
    if api_key not in valid_keys:
        logger.warning(f"Invalid API key attempt: {api_key[:10]}...")
        raise AuthenticationError("Invalid API key", operation="verify_api_key")

    return valid_keys[api_key]


async def verify_user_access(
    user_id: str,
    authenticated_user: str = Depends(verify_api_key)
) -> str:
    """Reject a path user id that differs from the key's user (403)"""
    if user_id != authenticated_user:
        logger.warning(f"API key for {authenticated_user} used on user {user_id}")
        raise AuthorizationError(
            f"API key is not valid for user {user_id}",
            resource=f"user {user_id}",
            user_id=authenticated_user,
            operation="verify_user_access"
        )
    return user_id
