from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, session, url_for

from app.crm.actions import ActionDispatcher
from app.crm.client import CRMClient, CRMError
from app.crm.auth import CRMAuthError
from app.crm.schema import EntitySchema, SchemaRegistry
from app.crm.security import is_confirmed
from app.crm.store import StoreRegistry
from app.crm.views import CreateForm, CRMView, DetailView

bp = Blueprint("crm", __name__)

_DRAFTS_KEY = "drafts"
_MODAL_KEY = "create_modal"


def _schemas() -> SchemaRegistry:
    return current_app.extensions["crm_schemas"]


def _stores() -> StoreRegistry:
    return current_app.extensions["crm_stores"]


def _client() -> CRMClient:
    return current_app.extensions["crm_client"]


def _dispatcher() -> ActionDispatcher:
    return current_app.extensions["crm_dispatcher"]


def _schema_or_404(entity_type: str) -> EntitySchema:
    if entity_type not in _schemas():
        abort(404)
    return _schemas().get(entity_type)


def _draft_key(schema: EntitySchema, record_id: str) -> str:
    return f"{schema.entity_type}:{record_id}"


def _save_draft(view: DetailView, record_id: str) -> None:
    drafts = dict(session.get(_DRAFTS_KEY) or {})
    drafts[_draft_key(view.schema, record_id)] = view.to_draft()
    session[_DRAFTS_KEY] = drafts


def _load_draft(schema: EntitySchema, record_id: str) -> DetailView | None:
    draft = (session.get(_DRAFTS_KEY) or {}).get(_draft_key(schema, record_id))
    if not draft:
        return None
    return DetailView.from_draft(schema, draft)


def _close_modal() -> None:
    session.pop(_MODAL_KEY, None)


@bp.get("/<entity_type>s")
def records_list(entity_type: str):
    schema = _schema_or_404(entity_type)
    # leaving a detail page discards its unsaved draft
    session.pop(_DRAFTS_KEY, None)

    create = (request.args.get("create") or "").strip()
    if create == "1" and schema.create_fields:
        session[_MODAL_KEY] = schema.entity_type
    elif create == "0":
        _close_modal()

    view = CRMView(schema, _stores()[entity_type])
    view.mount(_client())
    content = view.get_content()
    return render_template(
        "crm/list.html",
        schema=schema,
        content=content,
        form=CreateForm(schema) if content.can_create else None,
        modal_open=session.get(_MODAL_KEY) == schema.entity_type,
    )


@bp.post("/<entity_type>s/new")
def records_create(entity_type: str):
    schema = _schema_or_404(entity_type)
    if not schema.create_fields:
        abort(404)
    form = CreateForm(schema)
    for f in schema.create_fields:
        form.change(f.name, request.form.get(f.name, ""))
    if form.submit(_dispatcher(), close=_close_modal):
        flash(f"{schema.title}: record created.", "success")
    else:
        flash(f"{schema.title}: create failed. The CRM rejected the request.", "danger")
    return redirect(url_for("crm.records_list", entity_type=schema.entity_type))


@bp.post("/<entity_type>s/<record_id>/<kind>")
def records_row_action(entity_type: str, record_id: str, kind: str):
    schema = _schema_or_404(entity_type)
    view = CRMView(schema, _stores()[entity_type])
    if kind != view.row_action.kind:
        abort(404)
    confirmed = is_confirmed(request)
    ok = view.handle_delete(_dispatcher(), record_id, confirm=lambda _message: confirmed)
    if not confirmed:
        flash("Cancelled; nothing was changed.", "info")
    elif ok:
        flash(f"{view.row_action.label}: done.", "success")
    else:
        flash(f"{view.row_action.label} failed. The CRM rejected the request.", "danger")
    return redirect(url_for("crm.records_list", entity_type=schema.entity_type))


def _detail_view(schema: EntitySchema, record_id: str) -> DetailView | None:
    view = _load_draft(schema, record_id)
    if view is not None:
        return view
    view = DetailView(schema)
    try:
        view.load(_client(), record_id)
    except (CRMError, CRMAuthError) as e:
        current_app.logger.error("Detail load failed (entity_type=%s id=%s): %s", schema.entity_type, record_id, e)
        return None
    return view


@bp.get("/<entity_type>Details/<record_id>")
def record_detail(entity_type: str, record_id: str):
    schema = _schema_or_404(entity_type)
    if not schema.has_detail:
        abort(404)
    view = _detail_view(schema, record_id)
    if view is None:
        return render_template("crm/detail.html", schema=schema, view=None, record_id=record_id), 502
    _save_draft(view, record_id)
    return render_template("crm/detail.html", schema=schema, view=view, record_id=record_id)


@bp.post("/<entity_type>Details/<record_id>")
def record_detail_post(entity_type: str, record_id: str):
    schema = _schema_or_404(entity_type)
    if not schema.has_detail:
        abort(404)
    view = _detail_view(schema, record_id)
    if view is None:
        flash("Error while loading!", "danger")
        return redirect(url_for("crm.record_detail", entity_type=entity_type, record_id=record_id))

    op = (request.form.get("op") or "").strip()
    if op == "edit":
        view.toggle_edit()
    elif op == "cancel":
        view.cancel()
    elif op == "save":
        if view.disabled:
            flash("Click Update Record before saving.", "warning")
        else:
            for name in view.editable_fields():
                if name in request.form:
                    view.change(name, request.form.get(name))
            if view.submit(_dispatcher()):
                flash("Record saved.", "success")
            else:
                flash("Save failed. The CRM rejected the update.", "danger")
    else:
        abort(400)

    _save_draft(view, record_id)
    return redirect(url_for("crm.record_detail", entity_type=entity_type, record_id=record_id))
