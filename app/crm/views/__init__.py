from app.crm.views.create_form import CreateForm
from app.crm.views.detail_view import DetailView
from app.crm.views.list_view import CRMView, ListContent, Row, RowAction

__all__ = ["CRMView", "CreateForm", "DetailView", "ListContent", "Row", "RowAction"]
