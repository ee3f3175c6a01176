from __future__ import annotations

import logging
import uuid

from flask import Flask, g, render_template, request
from dotenv import load_dotenv

from app.crm.actions import ActionDispatcher
from app.crm.auth import token_provider_from_config
from app.crm.client import CRMClient
from app.crm.config import load_config
from app.crm.modules import default_schemas
from app.crm.store import StoreRegistry, log_transition


def create_app(crm_client: CRMClient | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())

    # CSRF protection (minimal)
    from app.crm.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    @app.before_request
    def _request_id():
        if not getattr(g, "request_id", None):
            g.request_id = uuid.uuid4().hex

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("CRM_BASE_URL"):
            raise RuntimeError("CRM_BASE_URL is required in production.")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    schemas = default_schemas()
    stores = StoreRegistry.for_types(schemas.types())
    stores.subscribe_all(log_transition)
    if crm_client is None:
        crm_client = CRMClient(
            base_url=app.config["CRM_BASE_URL"],
            token_provider=token_provider_from_config(app.config),
            api_version=app.config["CRM_API_VERSION"],
            timeout_seconds=int(app.config["CRM_TIMEOUT_SECONDS"]),
        )
    app.extensions["crm_schemas"] = schemas
    app.extensions["crm_stores"] = stores
    app.extensions["crm_client"] = crm_client
    app.extensions["crm_dispatcher"] = ActionDispatcher(crm_client, schemas, stores)

    if not app.config.get("CRM_BASE_URL"):
        app.logger.warning("CRM_BASE_URL is not set; every CRM load will fail until it is configured.")

    from app.crm.routes import bp as routes_bp
    from app.crm.admin import bp as crm_bp

    app.register_blueprint(routes_bp)
    app.register_blueprint(crm_bp)

    @app.errorhandler(400)
    def _err_400(e):  # type: ignore[no-redef]
        return render_template("errors/400.html", message="Bad request."), 400

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
