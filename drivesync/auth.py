"""OAuth handshake performed when a directory is initialised."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from urllib.parse import urlencode

import requests
import typer

AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://accounts.google.com/o/oauth2/token"
REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"

CLIENT_ID_ENV = "GD_CLIENT_ID"
CLIENT_SECRET_ENV = "GD_CLIENT_SECRET"


class AuthError(RuntimeError):
    """Raised when the OAuth handshake cannot be completed."""


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str
    refresh_token: str


@dataclass(frozen=True)
class OAuthSettings:
    client_id: str
    client_secret: str
    redirect_uri: str = REDIRECT_URI
    scope: str = DRIVE_SCOPE

    @classmethod
    def from_env(cls, prompt: Callable[..., str] = typer.prompt) -> "OAuthSettings":
        """Read the OAuth client from the environment, prompting for anything missing."""

        client_id = os.environ.get(CLIENT_ID_ENV) or prompt("OAuth client id")
        client_secret = os.environ.get(CLIENT_SECRET_ENV) or prompt("OAuth client secret", hide_input=True)
        return cls(client_id=client_id.strip(), client_secret=client_secret.strip())

    def authorize_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "access_type": "offline",
        }
        return f"{AUTH_URL}?{urlencode(params)}"


class Authenticator(Protocol):
    """Anything able to produce credentials for a new context."""

    def authenticate(self) -> Credentials:
        ...


class GoogleAuthenticator:
    """Interactive installed-app flow against Google's OAuth endpoints."""

    def __init__(
        self,
        settings: Optional[OAuthSettings] = None,
        session: Optional[requests.Session] = None,
        prompt: Callable[..., str] = typer.prompt,
        echo: Callable[[str], None] = typer.echo,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._prompt = prompt
        self._echo = echo

    @property
    def settings(self) -> OAuthSettings:
        if self._settings is None:
            self._settings = OAuthSettings.from_env(self._prompt)
        return self._settings

    def authenticate(self) -> Credentials:
        settings = self.settings
        if not settings.client_id or not settings.client_secret:
            raise AuthError("OAuth client id and secret are required.")

        self._echo("Visit the following URL to authorize access:")
        self._echo(settings.authorize_url())
        code = self._prompt("Enter the authorization code").strip()
        if not code:
            raise AuthError("No authorization code provided.")

        return Credentials(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            refresh_token=self.exchange_code(code),
        )

    def exchange_code(self, code: str) -> str:
        """Trade an authorization code for a refresh token."""

        settings = self.settings
        payload = {
            "code": code,
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "redirect_uri": settings.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            response = self._session.post(TOKEN_URL, data=payload, timeout=15)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            raise AuthError(f"Token exchange failed: {exc}") from exc
        except ValueError as exc:
            raise AuthError("Token endpoint returned invalid JSON.") from exc

        refresh_token = body.get("refresh_token") if isinstance(body, dict) else None
        if not refresh_token:
            raise AuthError("Token endpoint did not return a refresh token.")
        return refresh_token
