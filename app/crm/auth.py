"""
Bearer tokens for the CRM Web API.

Production uses the Azure AD client-credentials flow (application user in the
CRM). Local development can hand in a pre-issued token via CRM_ACCESS_TOKEN.
"""

from __future__ import annotations

import json
import threading
import time
import urllib.error
import urllib.parse
import urllib.request

AUTHORITY = "https://login.microsoftonline.com"

# refresh this many seconds before the token actually expires
EXPIRY_SKEW = 60


class CRMAuthError(RuntimeError):
    pass


class TokenProvider:
    def get_token(self) -> str:
        raise NotImplementedError


class StaticTokenProvider(TokenProvider):
    def __init__(self, token: str):
        self._token = token

    def get_token(self) -> str:
        if not self._token:
            raise CRMAuthError("No CRM access token configured (set CRM_ACCESS_TOKEN or client credentials).")
        return self._token


class ClientCredentialsTokenProvider(TokenProvider):
    def __init__(
        self,
        *,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        resource: str,
        authority: str = AUTHORITY,
        timeout_seconds: int = 30,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.resource = resource.rstrip("/")
        self.authority = authority.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def _token_url(self) -> str:
        return f"{self.authority}/{urllib.parse.quote(self.tenant_id)}/oauth2/v2.0/token"

    def get_token(self) -> str:
        with self._lock:
            if self._token and time.time() < self._expires_at - EXPIRY_SKEW:
                return self._token
            self._token, self._expires_at = self._request_token()
            return self._token

    def _request_token(self) -> tuple[str, float]:
        form = urllib.parse.urlencode(
            {
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": f"{self.resource}/.default",
            }
        ).encode("ascii")
        req = urllib.request.Request(self._token_url(), data=form, method="POST")
        req.add_header("Content-Type", "application/x-www-form-urlencoded")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                j = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            try:
                body = e.read().decode("utf-8", errors="ignore")
            except Exception:
                body = ""
            raise CRMAuthError(f"Token request rejected (HTTP {e.code}): {body[:300]}") from e
        except Exception as e:
            raise CRMAuthError(f"Token request failed: {e}") from e

        token = j.get("access_token") if isinstance(j, dict) else None
        if not token:
            raise CRMAuthError("Token response did not include an access_token.")
        expires_in = int(j.get("expires_in") or 3600)
        return token, time.time() + expires_in


def token_provider_from_config(config: dict) -> TokenProvider:
    tenant = (config.get("CRM_TENANT_ID") or "").strip()
    client_id = (config.get("CRM_CLIENT_ID") or "").strip()
    secret = (config.get("CRM_CLIENT_SECRET") or "").strip()
    if tenant and client_id and secret:
        return ClientCredentialsTokenProvider(
            tenant_id=tenant,
            client_id=client_id,
            client_secret=secret,
            resource=(config.get("CRM_RESOURCE") or config.get("CRM_BASE_URL") or "").strip(),
        )
    return StaticTokenProvider((config.get("CRM_ACCESS_TOKEN") or "").strip())
