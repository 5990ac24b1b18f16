from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_current_actor
from app.core.rate_limit import limiter
from app.db.base import get_db
from app.schemas.user import (
    Actor, AuthResponse, LoginRequest, MessageResponse, ProfileResponse, RegisterRequest
)
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user, token = AuthService(db).register(data)
    return {"success": True, "token": token, "user": user}

@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)):
    user, token = AuthService(db).login(credentials)
    return {"success": True, "token": token, "user": user}

@router.get("/me", response_model=ProfileResponse)
def me(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    user = AuthService(db).get_profile(actor)
    return {"success": True, "data": user}

@router.post("/logout", response_model=MessageResponse)
def logout(actor: Actor = Depends(get_current_actor)):
    # Tokens are stateless; the client discards its copy
    return {"success": True, "message": "Logged out"}
