"""Authentication API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import AUTH_COOKIE, get_hub, get_session_id, require_auth
from app.config import get_settings
from app.schemas.auth import LoginRequest, TokenResponse, UserRead
from app.schemas.user import User
from app.services.auth import INVALID_CREDENTIALS_MESSAGE, create_access_token
from app.services.hub_store import HubStore

router = APIRouter()


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the httponly session cookie shared by the API and the UI."""
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * get_settings().access_token_expire_hours,
        path="/",
    )


def issue_token(user: User, session_id: str) -> str:
    return create_access_token(data={"sub": user.username, "sid": session_id})


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    hub: HubStore = Depends(get_hub),
) -> TokenResponse:
    """Authenticate user and return JWT token.

    Also sets an httponly cookie for browser sessions.
    """
    result = hub.login(body.username, body.password)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS_MESSAGE,
        )
    user, session_id = result
    token = issue_token(user, session_id)
    set_auth_cookie(response, token)
    return TokenResponse(access_token=token)


@router.post("/logout")
def logout(
    response: Response,
    hub: HubStore = Depends(get_hub),
    session_id: str | None = Depends(get_session_id),
) -> dict:
    """Close the session and clear the authentication cookie."""
    hub.logout(session_id)
    response.delete_cookie(key=AUTH_COOKIE, path="/")
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(require_auth)) -> UserRead:
    """Return the currently authenticated user's information."""
    return UserRead.model_validate(current_user)
