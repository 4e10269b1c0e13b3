"""
api/routes/v1/auth.py -- Registration and session REST endpoints.

Routes:
  POST /api/v1/register        -- create an account; no token issued
  POST /api/v1/login           -- password login; returns {token, refreshToken}
  POST /api/v1/refresh-token   -- exchange a live refresh token for a new access token
  POST /api/v1/logout          -- revoke the caller's refresh tokens (Bearer header)

All flow logic lives in auth.session.SessionService (app.state.sessions).
Handlers only translate between JSON bodies and the flow calls; AuthError
exceptions propagate to the handler in api/main.py.

Security:
  [H2] POST /login is rate-limited per client IP (Settings.login_rate_limit).
  [C1] Timing equalization lives in SessionService.login() -- never inline
       a username lookup + verify here.
  [M5] Cache-Control: no-store on login responses (and on every AuthError
       response via the exception handler).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
)
from auth.dependencies import bearer_token
from auth.session import SessionService
from core.config import get_settings

# Auth policy:
# - POST /api/v1/register:       public
# - POST /api/v1/login:          public, rate-limited
# - POST /api/v1/refresh-token:  public -- the refresh token is the credential
# - POST /api/v1/logout:         requires Bearer access token (checked by the flow)
router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create an account. The caller must log in separately to get tokens."""
    sessions: SessionService = request.app.state.sessions
    credential = sessions.register(body.username, body.password)
    return RegisterResponse(message="User registered successfully", id=credential.id)


@limiter.limit(get_settings().login_rate_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return an access/refresh pair.

    The refresh token is registered server-side and stays usable until it
    expires or the user logs out.
    """
    sessions: SessionService = request.app.state.sessions
    pair = sessions.login(body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=pair.token, refresh_token=pair.refresh_token).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/refresh-token", response_model=RefreshResponse)
def refresh_token(request: Request, body: RefreshRequest) -> RefreshResponse:
    """Issue a new access token. The refresh token itself is not rotated."""
    sessions: SessionService = request.app.state.sessions
    return RefreshResponse(token=sessions.refresh_access(body.refresh_token))


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request) -> MessageResponse:
    """Revoke the caller's refresh tokens. Succeeds even if none were live."""
    sessions: SessionService = request.app.state.sessions
    sessions.logout(bearer_token(request))
    return MessageResponse(message="Logged out successfully")
