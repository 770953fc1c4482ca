"""API key authentication for the map API."""

from __future__ import annotations

import os
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

API_KEY = os.getenv("MITGLIEDERKARTE_API_KEY")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(key: Optional[str] = Security(api_key_header)) -> Optional[str]:
    """Check the X-API-Key header against MITGLIEDERKARTE_API_KEY.

    Without a configured key every request passes. Membership counts are
    not public data, so deployments are expected to set one.
    """
    if API_KEY is None:
        return None
    if key is None or key != API_KEY:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")
    return key
