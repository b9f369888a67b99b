import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fleet.core.config import Settings, get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str, settings: Settings) -> str:
    """
    Return the caller id carried in a token issued by the auth service.
    Tokens are only verified here, never issued.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(status_code=401, detail="Token expired") from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail="Invalid token") from e

    user_id = payload.get("id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid authentication")
    return str(user_id)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return decode_user_id(credentials.credentials, settings)
