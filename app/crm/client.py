from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from app.crm.auth import CRMAuthError, TokenProvider
from app.crm.query import QueryDescriptor

logger = logging.getLogger(__name__)


class CRMError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class CRMRateLimited(CRMError):
    pass


class CRMQueryError(CRMError):
    pass


ODATA_HEADERS = {
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
    "Accept": "application/json",
    "Content-Type": "application/json; charset=utf-8",
}

IDEMPOTENT_METHODS = ("GET", "PATCH", "DELETE")

MAX_RETRY_AFTER_SECONDS = 60


@dataclass(frozen=True)
class CRMClient:
    base_url: str
    token_provider: TokenProvider
    api_version: str = "v9.1"
    timeout_seconds: int = 60

    def _api_root(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/data/{self.api_version}/"

    def _auth_header(self) -> str:
        return "Bearer " + self.token_provider.get_token()

    def request_json(self, method: str, path: str, *, body: dict[str, Any] | None = None, retries: int = 3) -> dict[str, Any]:
        if not self.base_url:
            raise CRMError("CRM_BASE_URL is not configured.")
        url = self._api_root() + path.lstrip("/")
        data = json.dumps(body).encode("utf-8") if body is not None else None

        last_err: Exception | None = None
        for attempt in range(retries + 1):
            try:
                req = urllib.request.Request(url, data=data, method=method)
                for k, v in ODATA_HEADERS.items():
                    req.add_header(k, v)
                req.add_header("Authorization", self._auth_header())
                with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                    raw = resp.read()
                    if not raw:
                        return {}
                    try:
                        return json.loads(raw.decode("utf-8"))
                    except Exception as e:
                        raise CRMError(f"Invalid JSON from CRM ({method} {path})") from e
            except urllib.error.HTTPError as e:
                if e.code == 429:
                    # throttled by the Web API service protection limits
                    time.sleep(_retry_after(e, attempt))
                    last_err = CRMRateLimited("Rate limited (429)", status=429)
                    continue
                try:
                    detail = e.read().decode("utf-8", errors="ignore")
                except Exception:
                    detail = ""
                raise CRMError(f"HTTP {e.code} from CRM ({method} {path}): {detail[:300]}", status=e.code) from e
            except (CRMError, CRMAuthError):
                raise
            except Exception as e:
                if method not in IDEMPOTENT_METHODS:
                    # the CRM may already have committed the write; never resend it
                    logger.error("CRM request %s %s failed, not retried: %s", method, path, e)
                    raise CRMError(f"CRM request failed ({method} {path}): {e}") from e
                last_err = e
                logger.warning("CRM request %s %s failed (attempt %s): %s", method, path, attempt + 1, e)
                time.sleep(min(1 * (attempt + 1), 5))
                continue
        if isinstance(last_err, CRMRateLimited):
            raise CRMRateLimited(f"CRM request still rate limited after retries ({method} {path})", status=429)
        raise CRMError(f"CRM request failed after retries: {last_err}")

    def fetch(self, query: QueryDescriptor) -> dict[str, Any]:
        if not query.valid:
            raise CRMQueryError("Refusing to send an empty query (missing entity set or record id).")
        return self.request_json("GET", query.to_path())

    def list_records(self, query: QueryDescriptor) -> list[dict[str, Any]]:
        j = self.fetch(query)
        rows = j.get("value") or []
        return rows if isinstance(rows, list) else []

    def get_record(self, query: QueryDescriptor) -> dict[str, Any]:
        j = self.fetch(query)
        return j if isinstance(j, dict) else {}

    def create_record(self, entity_set: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self.request_json("POST", entity_set, body=payload)

    def update_record(self, entity_set: str, record_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self.request_json("PATCH", _record_path(entity_set, record_id), body=payload)

    def delete_record(self, entity_set: str, record_id: str) -> dict[str, Any]:
        return self.request_json("DELETE", _record_path(entity_set, record_id))

    def invoke_action(self, entity_set: str, record_id: str, action: str) -> dict[str, Any]:
        return self.request_json(
            "POST",
            f"{_record_path(entity_set, record_id)}/Microsoft.Dynamics.CRM.{action}",
            body={},
        )


def _record_path(entity_set: str, record_id: str) -> str:
    rid = (record_id or "").strip()
    if not rid:
        raise CRMQueryError(f"Record id is required ({entity_set}).")
    return f"{entity_set}({urllib.parse.quote(rid, safe='')})"


def _retry_after(err: urllib.error.HTTPError, attempt: int) -> float:
    raw = (err.headers.get("Retry-After") if err.headers else None) or ""
    try:
        return min(max(float(raw.strip()), 0.0), MAX_RETRY_AFTER_SECONDS)
    except ValueError:
        return min(2 * (attempt + 1), 10)
