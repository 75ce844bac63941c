"""
Owner Identity Module (v1.0.0)
Resolves the requesting owner from the upstream auth gateway's header.
"""
import os
import logging
from typing import Optional
from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)

# Configuration
USER_ID_HEADER = "X-User-Id"
DEV_USER_ID = "dev_user"


def _bypass_auth() -> bool:
    return os.getenv("CLOS8_BYPASS_AUTH", "false").lower() == "true"


async def get_current_owner(
    x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)
) -> str:
    """
    FastAPI dependency returning the owner id for a request.

    Usage:
        @router.get("/protected")
        async def protected_route(owner_id: str = Depends(get_current_owner)):
            ...

    Raises:
        HTTPException 401: If the header is missing
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    # Bypass auth for development
    if _bypass_auth():
        logger.warning("Auth bypass enabled - DEV MODE")
        return DEV_USER_ID

    raise HTTPException(
        status_code=401,
        detail=f"Missing owner identity. Include '{USER_ID_HEADER}' header."
    )
