from typing import Optional
from jose import JWTError, jwt
from datetime import datetime, timezone
from app.core.config import settings

def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate access token issued by the identity service"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    
    # Check token type
    if payload.get("type") != "access":
        return None
    
    # Check expiration
    exp = payload.get("exp")
    if exp is None or datetime.now(timezone.utc).timestamp() > exp:
        return None
    
    return payload
