"""Declarative validation of dataclass fields through field metadata.

Rules are given per field as ``field(metadata={"validate": "required,email"})``.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Sized
from typing import Any
from urllib.parse import urlsplit

TAG_KEY = "validate"

_EMAIL_RE = re.compile(
    r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
)
_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


@dataclasses.dataclass(frozen=True)
class FieldError:
    """One field that failed one validation rule."""

    field: str
    tag: str
    param: str = ""

    def __str__(self) -> str:
        return f"field {self.field!r} failed on the {self.tag!r} tag"


class ValidationError(ValueError):
    """Raised when one or more fields fail validation."""

    def __init__(self, errors: list[FieldError] | tuple[FieldError, ...]):
        self.errors: tuple[FieldError, ...] = tuple(errors)
        super().__init__("; ".join(str(e) for e in self.errors))


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float, complex)):
        return value == 0
    if isinstance(value, Sized) and not dataclasses.is_dataclass(value):
        return len(value) == 0
    return False


def _measure(value: Any, tag: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, Sized):
        return len(value)
    raise TypeError(f"tag {tag!r} cannot be applied to {type(value).__name__}")


def _number(param: str, tag: str) -> float:
    try:
        return float(param)
    except ValueError as exc:
        raise ValueError(f"tag {tag!r} needs a numeric parameter, got {param!r}") from exc


def _compare(tag: str, op: Callable[[float, float], bool]) -> Callable[[Any, str], bool]:
    return lambda value, param: op(_measure(value, tag), _number(param, tag))


def _is_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parts = urlsplit(value)
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


_CHECKS: dict[str, Callable[[Any, str], bool]] = {
    "required": lambda value, _: not _is_zero(value),
    "email": lambda value, _: isinstance(value, str) and _EMAIL_RE.fullmatch(value) is not None,
    "url": lambda value, _: _is_url(value),
    "uuid": lambda value, _: isinstance(value, str) and _UUID_RE.fullmatch(value) is not None,
    "oneof": lambda value, param: str(value) in param.split(),
    "min": _compare("min", lambda a, b: a >= b),
    "max": _compare("max", lambda a, b: a <= b),
    "len": _compare("len", lambda a, b: a == b),
    "gt": _compare("gt", lambda a, b: a > b),
    "gte": _compare("gte", lambda a, b: a >= b),
    "lt": _compare("lt", lambda a, b: a < b),
    "lte": _compare("lte", lambda a, b: a <= b),
}


def _check_field(name: str, value: Any, rules: str) -> FieldError | None:
    if rules.strip() == "-":
        return None
    for rule in filter(None, (r.strip() for r in rules.split(","))):
        tag, _, param = rule.partition("=")
        if tag == "omitempty":
            if _is_zero(value):
                return None
            continue
        check = _CHECKS.get(tag)
        if check is None:
            raise ValueError(f"undefined validation tag {tag!r} on field {name!r}")
        if not check(value, param):
            return FieldError(name, tag, param)
    return None


def _collect(obj: Any, errors: list[FieldError]) -> None:
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        error = _check_field(f.name, value, f.metadata.get(TAG_KEY, ""))
        if error is not None:
            errors.append(error)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            _collect(value, errors)


def validate_struct(obj: Any) -> Any:
    """Validate a dataclass instance, returning it unchanged or raising ValidationError."""
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(
            f"validate_struct expects a dataclass instance, got {type(obj).__name__}"
        )
    errors: list[FieldError] = []
    _collect(obj, errors)
    if errors:
        raise ValidationError(errors)
    return obj


def validation_errors(err: BaseException) -> dict[str, str]:
    """Map a validation failure to lowercase field name -> message; other errors to 'error'."""
    if isinstance(err, ValidationError):
        return {e.field.lower(): f"failed validation: {e.tag}" for e in err.errors}
    return {"error": str(err)}