from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from app.crm.formatting import TRANSFORMS

if TYPE_CHECKING:
    from app.crm.actions import ActionDispatcher
    from app.crm.schema import CreateField, EntitySchema


class CreateForm:
    """
    Quick-create form state. Each input is normalized as it changes (names
    capitalized, email lowered, address lines upper-cased), so submit sends
    the state exactly as held.
    """

    def __init__(self, schema: "EntitySchema"):
        self.schema = schema
        self.fields: dict[str, "CreateField"] = {f.name: f for f in schema.create_fields}
        self.state: dict[str, Any] = {name: "" for name in self.fields}

    def change(self, name: str, value: Any) -> None:
        f = self.fields.get(name)
        if f is None:
            return
        transform = TRANSFORMS.get(f.transform, TRANSFORMS["none"])
        value = transform(value)
        if f.max_length and isinstance(value, str):
            value = value[: f.max_length]
        self.state[name] = value

    def submit(self, dispatcher: "ActionDispatcher", close: Callable[[], None]) -> bool:
        ok = dispatcher.create(self.schema.entity_type, dict(self.state))
        close()
        return ok
