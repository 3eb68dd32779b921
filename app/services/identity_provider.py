"""
External OAuth identity provider

The rest of the service only sees IdentityProvider.exchange_code and
IdentityProvider.fetch_profile; transport details stay in the concrete
provider.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

KAKAO_MEMBER_PREFIX = "K"


class IdentityProviderError(Exception):
    """Raised when the provider cannot complete a token or profile call"""


@dataclass
class OAuthTokens:
    access_token: str
    refresh_token: str


@dataclass
class IdentityProfile:
    member_id: str
    name: str
    email: Optional[str] = None


class IdentityProvider(ABC):
    @abstractmethod
    def exchange_code(self, code: str) -> OAuthTokens:
        """Trade an authorization code for an access/refresh token pair"""

    @abstractmethod
    def fetch_profile(self, access_token: str) -> IdentityProfile:
        """Look up the account behind an access token"""


class KakaoIdentityProvider(IdentityProvider):
    """Kakao Login (kauth.kakao.com / kapi.kakao.com)"""

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        auth_base_url: str = "https://kauth.kakao.com",
        api_base_url: str = "https://kapi.kakao.com",
        timeout: int = 10,
    ):
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.auth_base_url = auth_base_url.rstrip("/")
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout

    def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        logger.info("%s %s", method.upper(), url)
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise IdentityProviderError(f"Kakao {method.upper()} {url} failed: {e}") from e

    def exchange_code(self, code: str) -> OAuthTokens:
        payload = self._call(
            "post",
            f"{self.auth_base_url}/oauth/token",
            data={
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "code": code,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded;charset=utf-8"},
        )
        try:
            return OAuthTokens(access_token=payload["access_token"], refresh_token=payload["refresh_token"])
        except KeyError as e:
            raise IdentityProviderError(f"Kakao token response missing {e}") from e

    def fetch_profile(self, access_token: str) -> IdentityProfile:
        payload = self._call(
            "get",
            f"{self.api_base_url}/v2/user/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            member_id = f"{KAKAO_MEMBER_PREFIX}{payload['id']}"
            name = payload["properties"]["nickname"]
        except (KeyError, TypeError) as e:
            raise IdentityProviderError(f"Kakao profile response missing {e}") from e

        # Email is only usable once the user has agreed to share it
        account = payload.get("kakao_account") or {}
        email = None
        if not account.get("email_needs_agreement", True):
            email = account.get("email")

        return IdentityProfile(member_id=member_id, name=name, email=email)


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the configured provider"""
    return KakaoIdentityProvider(
        client_id=settings.KAKAO_API_KEY,
        redirect_uri=settings.KAKAO_REDIRECT_URI,
        auth_base_url=settings.KAKAO_AUTH_BASE_URL,
        api_base_url=settings.KAKAO_API_BASE_URL,
        timeout=settings.KAKAO_TIMEOUT_SECONDS,
    )
