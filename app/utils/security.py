"""
Security utilities and authentication
"""

import secrets

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings

security = HTTPBearer()

def token_is_valid(token: str) -> bool:
    return secrets.compare_digest(token or "", settings.API_TOKEN)

def verify_api_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify the bearer token sent by the planner UI"""
    if not token_is_valid(credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API token"
        )
    return credentials.credentials
