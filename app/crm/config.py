import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str

    crm_base_url: str
    crm_api_version: str
    crm_tenant_id: str
    crm_client_id: str
    crm_client_secret: str
    crm_resource: str
    crm_access_token: str
    crm_timeout_seconds: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> Settings:
    base_url = _getenv("CRM_BASE_URL", "")
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        crm_base_url=base_url,
        crm_api_version=_getenv("CRM_API_VERSION", "v9.1"),
        crm_tenant_id=_getenv("CRM_TENANT_ID", ""),
        crm_client_id=_getenv("CRM_CLIENT_ID", ""),
        crm_client_secret=_getenv("CRM_CLIENT_SECRET", ""),
        crm_resource=_getenv("CRM_RESOURCE", base_url),
        crm_access_token=_getenv("CRM_ACCESS_TOKEN", ""),
        crm_timeout_seconds=_getint("CRM_TIMEOUT_SECONDS", 60),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "CRM_BASE_URL": s.crm_base_url,
        "CRM_API_VERSION": s.crm_api_version,
        "CRM_TENANT_ID": s.crm_tenant_id,
        "CRM_CLIENT_ID": s.crm_client_id,
        "CRM_CLIENT_SECRET": s.crm_client_secret,
        "CRM_RESOURCE": s.crm_resource,
        "CRM_ACCESS_TOKEN": s.crm_access_token,
        "CRM_TIMEOUT_SECONDS": s.crm_timeout_seconds,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
    }
