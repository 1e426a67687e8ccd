import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from roomchat.auth import CurrentSession
from roomchat.config import Settings
from roomchat.database import get_db
from roomchat.dependencies import get_current_session, get_settings
from roomchat.errors import UserNotFoundError, ValidationError, WrongPasswordError
from roomchat.repositories.token_repository import TokenRepository
from roomchat.repositories.user_repository import UserRepository
from roomchat.schemas.user import AccountRequest, LoginResponse, PasswordChangeRequest, StatusResponse, TokenInfo

logger = logging.getLogger(__name__)
router = APIRouter()


def _token_repo(db: AsyncSession, settings: Settings) -> TokenRepository:
    return TokenRepository(
        db,
        max_retries=settings.TOKEN_ISSUE_MAX_RETRIES,
        ttl_hours=settings.SESSION_TOKEN_TTL_HOURS,
    )


@router.post("/register", response_model=StatusResponse)
async def register(details: AccountRequest, db: AsyncSession = Depends(get_db)):
    """Register a new account"""
    await UserRepository(db).register(details.username, details.password)
    return StatusResponse()


@router.post("/login", response_model=LoginResponse)
async def login(
    details: AccountRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Log in and issue a session token"""
    user_repo = UserRepository(db)
    try:
        user_id = await user_repo.verify(details.username, details.password)
    except (UserNotFoundError, WrongPasswordError):
        logger.info("Failed login for %s", details.username)
        raise ValidationError("Invalid login details")

    client_label = request.headers.get("user-agent", "unknown")
    token = await _token_repo(db, settings).issue(user_id, client_label)
    user = await user_repo.get_by_id(user_id)
    logger.info("User id=%s logged in", user_id)
    return LoginResponse(user_id=user_id, username=user.username, token=token)


@router.post("/change-password", response_model=StatusResponse)
async def change_password(
    details: PasswordChangeRequest,
    session: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Change the current user's password"""
    await UserRepository(db).change_password(session.user_id, details.old_password, details.new_password)
    return StatusResponse()


@router.post("/logout", response_model=StatusResponse)
async def logout(
    session: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Revoke the token used for this request"""
    await _token_repo(db, settings).revoke(session.user_id, session.token)
    return StatusResponse()


@router.get("/tokens", response_model=List[TokenInfo])
async def list_tokens(
    session: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """List the current user's session tokens"""
    return await _token_repo(db, settings).list(session.user_id, session.token)


@router.post("/clear-tokens", response_model=StatusResponse)
async def clear_tokens(
    session: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Revoke all of the current user's tokens"""
    await _token_repo(db, settings).revoke_all(session.user_id)
    return StatusResponse()
