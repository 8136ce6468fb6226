"""
Shared API dependencies: current user resolution and the live-update hub.
"""
from typing import Optional
from fastapi import Depends
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from tripledger.core.exceptions import Unauthorized
from tripledger.core.security import decode_access_token
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.services.notifier import TripUpdateHub

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_token_user(token: Optional[str], db: Session) -> Optional[User]:
    """Return the active user a token identifies, or None."""
    if not token:
        return None
    payload = decode_access_token(token)
    if not payload or "user_id" not in payload:
        return None
    user = db.query(User).filter(User.id == payload["user_id"]).first()
    if not user or not user.is_active:
        return None
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the acting user from the bearer token."""
    user = resolve_token_user(credentials.credentials if credentials else None, db)
    if not user:
        raise Unauthorized("Could not validate credentials")
    return user


def get_update_hub(connection: HTTPConnection) -> TripUpdateHub:
    """Process-scoped live-update registry stored on the application."""
    return connection.app.state.update_hub
