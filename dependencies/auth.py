from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import BaseModel, ValidationError

from core.errors import ApiError, ErrorCode
from core.security import decode_access_token
from models.enums import Role


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity carried by the session token)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    role: Role
    administrator_id: Optional[str] = None   # tenant (administrators / operators)
    condominium_id: Optional[str] = None     # board members only


def _unauthorized() -> ApiError:
    return ApiError(
        ErrorCode.unauthorized,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================
# AUTH DECODING (local JWT, no store round-trip)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:

    if not credentials or not credentials.credentials:
        raise _unauthorized()

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise _unauthorized()

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized()

    try:
        return CurrentUser(
            id=user_id,
            role=payload.get("role"),
            administrator_id=payload.get("administrator_id"),
            condominium_id=payload.get("condominium_id"),
        )
    except ValidationError:
        # Token signed by us but carrying an unknown role
        raise _unauthorized()

