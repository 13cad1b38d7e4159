"""Current-user profile routes. Protected by the auth guard."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from keepmark.auth.dependencies import get_current_user, get_token_issuer
from keepmark.auth.jwt import TokenIssuer
from keepmark.db.engine import get_db
from keepmark.db.models import User
from keepmark.schemas.user import UserRead, UserUpdate
from keepmark.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(
    request: Request,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> UserService:
    return UserService(db, issuer, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


@router.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.patch("", response_model=UserRead)
async def edit_me(
    body: UserUpdate,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Edit the current user's email and/or name."""
    return await svc.update_profile(user, body.model_dump(exclude_unset=True))
