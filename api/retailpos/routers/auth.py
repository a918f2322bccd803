import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from retailpos.core.security import create_access_token, verify_password
from retailpos.db.session import get_db
from retailpos.models import User
from retailpos.schemas.auth import LoginRequest, TokenResponse
from retailpos.services.cart import CartStore
from retailpos.services.deps import get_cart_store, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.execute(select(User).where(User.email == payload.email.lower())).scalar_one_or_none()

    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="E-posta veya şifre hatalı")

    if not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="E-posta veya şifre hatalı")

    user.last_login_at = datetime.now()
    db.commit()

    token = create_access_token(user)
    return TokenResponse(
        access_token=token,
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        branch_id=user.branch_id,
    )


@router.post("/logout")
def logout(
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    carts.discard(user.id)
    return {"ok": True}
