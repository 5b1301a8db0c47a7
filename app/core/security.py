import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request


def verify_api_key(api_key: Optional[str], expected: Optional[str]) -> bool:
    """
    Verify if the API key is valid. With no key configured every request passes.
    """
    if not expected:
        return True
    return api_key is not None and secrets.compare_digest(api_key, expected)


async def require_api_key(request: Request, x_api_key: Optional[str] = Header(None)):
    if not verify_api_key(x_api_key, request.app.state.settings.api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")
