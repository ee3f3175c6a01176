from flask import Blueprint, current_app, render_template

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    schemas = current_app.extensions["crm_schemas"]
    return render_template("public/index.html", schemas=list(schemas))


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for k8s/DO probes. No CRM access, minimal overhead.
    """
    return "ok", 200
