# phishsim/auth.py
# Owner tokens: signed owner ids issued by the external auth service.

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from phishsim.config import settings

serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="owner-token")
bearer = HTTPBearer(auto_error=False)


def issue_owner_token(owner_id: str) -> str:
    return serializer.dumps(owner_id)


def read_owner_token(token: str, max_age: int = None) -> str:
    """Return the owner id inside *token*; raises itsdangerous errors."""
    return serializer.loads(token, max_age=max_age or settings.TOKEN_MAX_AGE)


def get_current_owner(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> str:
    if creds is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return read_owner_token(creds.credentials)
    except SignatureExpired:
        detail = "Token expired"
    except BadSignature:
        detail = "Invalid token"
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
