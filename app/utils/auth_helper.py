from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlmodel import Session, select

from app.db.db import get_session
from app.models.user import User

bearer_scheme_optional = HTTPBearer(auto_error=False)


def _decode(request: Request, token: str):
    settings = request.app.state.settings
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def get_current_user_optional(
    request: Request,
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme_optional),
):
    if not token:
        return None

    try:
        return _decode(request, token.credentials)
    except JWTError:
        return None

bearer_scheme_required = HTTPBearer(auto_error=True)

def get_current_user_required(
    request: Request,
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme_required),
):
    try:
        return _decode(request, token.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def get_db_user(session: Session, current_user) -> User:
    user = session.exec(
        select(User).where(User.public_id == current_user["sub"])
    ).first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


def require_user(
    session: Session = Depends(get_session),
    current_user=Depends(get_current_user_required),
) -> User:
    return get_db_user(session, current_user)


def optional_user(
    session: Session = Depends(get_session),
    current_user=Depends(get_current_user_optional),
):
    if not current_user:
        return None

    return session.exec(
        select(User).where(User.public_id == current_user["sub"])
    ).first()
