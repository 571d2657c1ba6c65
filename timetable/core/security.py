import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from .config import settings


async def require_admin(x_admin_token: Optional[str] = Header(None, alias="X-Admin-Token")):
    """Guard for endpoints that write schedules."""
    if not settings.admin_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin token not configured. Set ADMIN_API_KEY env and pass X-Admin-Token",
        )
    if not x_admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Admin-Token header")
    # Headers arrive latin-1 decoded; str compare_digest rejects non-ASCII
    if not hmac.compare_digest(x_admin_token.encode("utf-8"), settings.admin_api_key.encode("utf-8")):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin token")
    return True
