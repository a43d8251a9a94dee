# bizmarket/deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from .db import get_db
from .config import settings
from .models.user import User
from .utils.security import decode_jwt


# ------------------ Current user ------------------

def _token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    # 1) Authorization: Bearer <jwt>
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    # 2) кука с токеном
    return request.cookies.get(settings.COOKIE_NAME)


def get_current_user_optional(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[User]:
    token = _token_from_request(request, authorization)
    if not token:
        return None
    claims = decode_jwt(token)
    if not claims:
        return None
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.get(User, user_id)


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user
