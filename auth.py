"""Optional Google sign-in for the site root. Sessions are signed cookies (Starlette SessionMiddleware)."""
from __future__ import annotations

import logging
import secrets
from typing import Any
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse

from config import AppConfig

logger = logging.getLogger("auth")

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class OAuthError(RuntimeError):
    pass


class GoogleOAuthClient:
    """Sync client for the Google authorization-code flow."""

    def __init__(self, client_id: str, client_secret: str, callback_url: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: AppConfig) -> "GoogleOAuthClient":
        return cls(config.google_client_id, config.google_client_secret, config.google_callback_url)

    def authorization_url(self, state: str) -> str:
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
        })
        return f"{GOOGLE_AUTH_URL}?{query}"

    def exchange_code(self, code: str) -> str:
        """Trade an authorization code for an access token."""
        try:
            r = httpx.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.callback_url,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
            token = r.json().get("access_token")
        except (httpx.HTTPError, ValueError) as e:
            raise OAuthError(f"Token exchange failed: {e}") from e
        if not token:
            raise OAuthError("Token response had no access_token")
        return token

    def fetch_user(self, access_token: str) -> dict[str, Any]:
        """Return {id, email, name} for the signed-in Google account."""
        try:
            r = httpx.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OAuthError(f"Userinfo request failed: {e}") from e
        return {"id": data.get("sub"), "email": data.get("email"), "name": data.get("name")}


def build_router(client: GoogleOAuthClient) -> APIRouter:
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.get("/google")
    def login(request: Request) -> RedirectResponse:
        state = secrets.token_urlsafe(16)
        request.session["oauth_state"] = state
        return RedirectResponse(client.authorization_url(state))

    @router.get("/google/callback")
    def callback(
        request: Request,
        code: str | None = None,
        state: str | None = None,
        error: str | None = None,
    ) -> RedirectResponse:
        expected = request.session.pop("oauth_state", None)
        if error:
            logger.warning("Google sign-in refused: %s", error)
            return RedirectResponse("/", status_code=302)
        if not code or not state or state != expected:
            logger.warning("Google sign-in callback with missing code or bad state")
            return RedirectResponse("/", status_code=302)
        try:
            user = client.fetch_user(client.exchange_code(code))
        except OAuthError as e:
            logger.warning("Google sign-in failed: %s", e)
            return RedirectResponse("/", status_code=302)
        request.session["user"] = user
        logger.info("Signed in %s", user.get("email"))
        return RedirectResponse("/", status_code=302)

    @router.get("/logout")
    def logout(request: Request) -> RedirectResponse:
        request.session.clear()
        return RedirectResponse("/", status_code=302)

    @router.get("/me")
    def me(request: Request) -> dict[str, Any]:
        return {"user": request.session.get("user")}

    return router


def current_user(request: Request) -> dict[str, Any] | None:
    if "session" not in request.scope:
        return None
    return request.session.get("user")


def require_user(request: Request) -> dict[str, Any]:
    """Dependency for routes that need a signed-in session."""
    user = current_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user
