"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers. They wire the
per-request pieces together — session → services → authenticator →
guard — from what the app factory put on app.state, and extract the
current identity from the request.

The token is looked up in the configured cookie first (browsers), then
in an "Authorization: Bearer" header (API clients). An invalid token and
a missing token both end up as "no identity".
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from stormtask.auth.authenticator import Authenticator
from stormtask.auth.guard import Access, OwnershipGuard
from stormtask.auth.jwt import Claims
from stormtask.config import Settings
from stormtask.db.engine import get_db
from stormtask.services.group_service import GroupService
from stormtask.services.task_service import TaskService
from stormtask.services.user_service import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ─── Services ────────────────────────────────────────────


def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(db, bcrypt_cost=settings.bcrypt_cost)


def get_group_service(db: AsyncSession = Depends(get_db)) -> GroupService:
    return GroupService(db)


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


def get_authenticator(
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
) -> Authenticator:
    return Authenticator(
        users,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_lifetime=timedelta(hours=settings.token_expire_hours),
    )


def get_guard(
    groups: GroupService = Depends(get_group_service),
    tasks: TaskService = Depends(get_task_service),
) -> OwnershipGuard:
    return OwnershipGuard(groups, tasks)


# ─── Identity ────────────────────────────────────────────


def extract_token(request: Request, cookie_name: str, authorization: Optional[str]) -> str:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    return ""


async def get_current_user_optional(
    request: Request,
    authorization: Optional[str] = Header(None),
    auth: Authenticator = Depends(get_authenticator),
    settings: Settings = Depends(get_settings),
) -> Optional[Claims]:
    """Extract current identity (optional — returns None if no valid token)."""
    token = extract_token(request, settings.token_cookie_name, authorization)
    return auth.validate_token(token)


async def get_current_user(
    claims: Optional[Claims] = Depends(get_current_user_optional),
) -> Claims:
    """Extract current identity (required — 401 if no valid token)."""
    if not claims:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


def require_access(access: Access, resource: str) -> None:
    """Turn a guard outcome into the matching HTTP error, or pass."""
    if access is Access.NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"{resource} not found")
    if access is Access.FORBIDDEN:
        raise HTTPException(status_code=401, detail=f"{resource} belongs to another user")
