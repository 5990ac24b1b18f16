from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError
from app.core.security import decode_access_token
from app.db.base import get_db, is_valid_id
from app.models.user import User
from app.schemas.user import Actor

security = HTTPBearer(auto_error=False)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the bearer token into the requesting Actor.

    Identity and role come from the token; the team is looked up from the
    user record since it is not part of the token.
    """
    if credentials is None:
        raise AuthenticationError()

    payload = decode_access_token(credentials.credentials)
    if payload is None or not is_valid_id(payload.get("id")):
        raise AuthenticationError()

    user = db.get(User, payload["id"])
    if user is None:
        raise AuthenticationError()

    try:
        return Actor(id=user.id, role=payload.get("role"), team=user.team)
    except PydanticValidationError as exc:
        raise AuthenticationError() from exc
