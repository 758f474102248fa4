"""User API — registration and self-service account management.

Learn: Every route except registration acts on the caller's own account,
identified by the token. There is no way to read or change someone
else's user record over HTTP.
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from stormtask.api.auth import set_token_cookie
from stormtask.auth.authenticator import Authenticator
from stormtask.auth.dependencies import (
    get_authenticator,
    get_current_user,
    get_settings,
    get_user_service,
)
from stormtask.auth.jwt import Claims
from stormtask.config import Settings
from stormtask.schemas.user import UserCreate, UserRead, UserUpdate
from stormtask.services.errors import ConflictError
from stormtask.services.user_service import UserService

router = APIRouter()


@router.post("/user", response_model=UserRead)
async def register(
    body: UserCreate,
    svc: UserService = Depends(get_user_service),
):
    """Create a new (non-admin) user account."""
    try:
        return await svc.create_user(body.email, body.name, body.password)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/user", response_model=UserRead)
async def get_me(
    claims: Claims = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    """Get the current authenticated user's account."""
    user = await svc.get_user_by_id(claims.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/user", response_model=UserRead)
async def update_me(
    body: UserUpdate,
    response: Response,
    claims: Claims = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
    auth: Authenticator = Depends(get_authenticator),
    settings: Settings = Depends(get_settings),
):
    """Replace email, name and password of the current user.

    Learn: The old token still carries the old email and name, so a fresh
    one is issued and the cookie replaced.
    """
    try:
        user = await svc.update_user(claims.user_id, body.email, body.name, body.password)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    token = await auth.issue_token(body.email, body.password)
    if token:
        set_token_cookie(response, token, settings)
    return user


@router.delete("/user")
async def delete_me(
    response: Response,
    claims: Claims = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    """Delete the current user along with all their groups and tasks."""
    deleted = await svc.delete_user(claims.user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    response.delete_cookie(settings.token_cookie_name)
    return {"deleted": True}
