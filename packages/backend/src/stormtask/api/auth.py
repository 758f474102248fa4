"""Auth API — log in and out.

Learn: Routes for the session token lifecycle:
- POST /authenticate → email/password → signed token, set as a cookie
- POST /logout → drop the cookie

The token is also returned in the body so non-browser clients can send
it back as "Authorization: Bearer <token>".
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from stormtask.auth.authenticator import Authenticator
from stormtask.auth.dependencies import get_authenticator, get_settings
from stormtask.config import Settings
from stormtask.schemas.user import Credentials, TokenResponse

router = APIRouter()


def set_token_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.token_cookie_name,
        value=token,
        max_age=settings.token_expire_hours * 3600,
        httponly=True,
        samesite="lax",
    )


@router.post("/authenticate", response_model=TokenResponse)
async def authenticate(
    body: Credentials,
    response: Response,
    auth: Authenticator = Depends(get_authenticator),
    settings: Settings = Depends(get_settings),
):
    """Exchange email and password for a session token."""
    token = await auth.issue_token(body.email, body.password)
    if not token:
        # Same answer for unknown email and wrong password.
        raise HTTPException(status_code=401, detail="Invalid credentials")

    set_token_cookie(response, token, settings)
    return TokenResponse(token=token)


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Clear the session cookie. The token itself stays valid until it expires."""
    response.delete_cookie(settings.token_cookie_name)
    return {"logged_out": True}
