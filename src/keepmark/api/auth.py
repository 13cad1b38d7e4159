"""Auth API — sign-up and sign-in.

Learn: Routes for establishing identity:
- POST /auth/signup → create an account, returns an access token (auto-login)
- POST /auth/signin → email/password → access token

Both routes are open. Every failure comes back as a KeepmarkError body;
a failed sign-in is the same 403 whether the email exists or not.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from keepmark.auth.dependencies import get_token_issuer
from keepmark.auth.jwt import TokenIssuer
from keepmark.db.engine import get_db
from keepmark.schemas.auth import SigninRequest, SignupRequest, TokenResponse
from keepmark.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(
    request: Request,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> UserService:
    return UserService(db, issuer, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(body: SignupRequest, svc: UserService = Depends(_svc)):
    """Create a new user account and sign it in."""
    _, token = await svc.register(body.email, body.password)
    return TokenResponse(access_token=token)


@router.post("/signin", response_model=TokenResponse)
async def signin(body: SigninRequest, svc: UserService = Depends(_svc)):
    """Sign in with email and password → access token."""
    _, token = await svc.authenticate(body.email, body.password)
    return TokenResponse(access_token=token)
