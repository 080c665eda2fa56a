"""
Field contracts shared by the request schemas.

Each helper returns an ``Annotated`` type so a schema reads as a plain list of
fields: ``amount: Amount``, ``category: text("Category", 2)``. Failures raise
``ValueError`` with the message the client sees.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Annotated, Any, Optional, Type

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, create_model
from pydantic.alias_generators import to_camel


class Schema(BaseModel):
    """Request body; camelCase on the wire, snake_case in Python and MongoDB."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def text(label: str, min_length: int = 1):
    def check(value: str) -> str:
        value = value.strip()
        if len(value) < min_length:
            if min_length == 1:
                raise ValueError(f"{label} is required")
            raise ValueError(f"{label} must be at least {min_length} characters")
        return value

    return Annotated[str, AfterValidator(check)]


def _strip(value: str) -> str:
    return value.strip()


Trimmed = Annotated[str, AfterValidator(_strip)]


def positive(label: str, kind: type = float):
    def check(value):
        if value <= 0:
            raise ValueError(f"{label} must be greater than 0")
        return value

    return Annotated[kind, AfterValidator(check)]


def non_negative(label: str, kind: type = float):
    def check(value):
        if value < 0:
            raise ValueError(f"{label} cannot be negative")
        return value

    return Annotated[kind, AfterValidator(check)]


Amount = positive("Amount")


def parse_iso_datetime(value: Any, label: str = "date") -> datetime:
    """Parse an ISO 8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValueError(f"Invalid {label}") from None
    else:
        raise ValueError(f"Invalid {label}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def iso_datetime(label: str = "date"):
    return Annotated[datetime, BeforeValidator(lambda v: parse_iso_datetime(v, label))]


def iso_day(label: str = "date"):
    return Annotated[date, BeforeValidator(lambda v: parse_iso_datetime(v, label).date())]


def object_id(label: str):
    def check(value: str) -> str:
        value = value.strip()
        if not ObjectId.is_valid(value):
            raise ValueError(f"Invalid {label} id")
        return value

    return Annotated[str, AfterValidator(check)]


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def day_range(day: date) -> dict:
    start = day_start(day)
    return {"$gte": start, "$lt": start + timedelta(days=1)}


def partial(model: Type[BaseModel], name: Optional[str] = None, **extra: Any) -> Type[BaseModel]:
    """Derive a PUT schema from a create schema.

    Every field becomes optional and defaults to None so that
    ``model_dump(exclude_unset=True)`` yields only what the client sent. Fields
    that are Optional on the create schema accept an explicit null (to clear
    them); the rest still reject it. ``extra`` adds update-only fields.
    """
    fields = {}
    for field_name, info in model.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        if _accepts_none(info.annotation):
            annotation = Optional[annotation]
        fields[field_name] = (annotation, None)
    for field_name, annotation in extra.items():
        fields[field_name] = (annotation, None)
    return create_model(name or f"{model.__name__}Update", __base__=Schema, **fields)


def _accepts_none(annotation) -> bool:
    return type(None) in getattr(annotation, "__args__", ())


def first_error_message(errors) -> str:
    """Human readable message for the first pydantic error of a request."""
    if not errors:
        return "Invalid request"
    err = errors[0]
    kind = err.get("type", "")
    if kind == "json_invalid":
        return "Invalid JSON body"
    if kind == "value_error":
        return str(err.get("msg", "")).removeprefix("Value error, ")
    loc = [str(part) for part in err.get("loc", ()) if not isinstance(part, int)]
    loc = [part for part in loc if part not in ("body", "query", "path", "cookie")]
    if not loc:
        if kind in ("missing", "model_attributes_type", "dict_type"):
            return "Invalid JSON body"
        return err.get("msg", "Invalid request")
    field = loc[-1]
    if kind == "missing":
        return f"{field} is required"
    return f"Invalid {field}: {err.get('msg', '')}"
