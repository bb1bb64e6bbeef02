"""Declarative per-field validation rules and the generic validator that runs them."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session


class FieldValidationError(ValueError):
    """Raised when a payload fails one or more field rules.

    ``errors`` maps each failing field to its messages; nothing is written
    when this is raised.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(summarize_errors(errors))

    @property
    def message(self) -> str:
        return str(self)


def summarize_errors(errors: Mapping[str, Sequence[str]]) -> str:
    """First message plus a count of the remaining ones."""
    messages = [message for field_messages in errors.values() for message in field_messages]
    if not messages:
        return "The given data was invalid."
    remaining = len(messages) - 1
    if remaining == 0:
        return messages[0]
    noun = "error" if remaining == 1 else "errors"
    return f"{messages[0]} (and {remaining} more {noun})"


@dataclass
class RuleContext:
    """Per-call state handed to every predicate."""

    db: Session | None = None
    ignore_id: int | None = None


@dataclass(frozen=True)
class Rule:
    """A predicate with the message reported when it fails.

    ``cast`` converts the value once the predicate passes, so later rules
    (and the caller) see the normalized type. ``implicit`` rules also run
    when the value is missing; ``present`` rules also run when the key is
    sent with a null value.
    """

    predicate: Callable[[Any, RuleContext], bool]
    message: str
    cast: Callable[[Any], Any] | None = None
    implicit: bool = False
    present: bool = False
    params: dict[str, Any] = field(default_factory=dict)

    def format(self, attribute: str) -> str:
        return self.message.format(attribute=attribute, **self.params)


RuleTable = Mapping[str, Sequence[Rule]]

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# Range of the 32-bit Integer columns
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def fits_integer_column(value: Any) -> bool:
    return isinstance(value, int) and INT32_MIN <= value <= INT32_MAX


def required() -> Rule:
    return Rule(lambda value, ctx: value is not None, "The {attribute} field is required.", implicit=True)


def string() -> Rule:
    return Rule(lambda value, ctx: isinstance(value, str), "The {attribute} field must be a string.")


def max_length(limit: int) -> Rule:
    return Rule(
        lambda value, ctx: len(value) <= limit,
        "The {attribute} field must not be greater than {max} characters.",
        params={"max": limit},
    )


def _is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in (0, 1)
    return isinstance(value, str) and value in ("0", "1")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value == "1"
    return bool(value)


def boolean() -> Rule:
    """Accepts true/false and 0/1; an explicit null is rejected."""
    return Rule(
        lambda value, ctx: _is_boolean(value),
        "The {attribute} field must be true or false.",
        cast=_to_bool,
        present=True,
    )


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def numeric() -> Rule:
    return Rule(lambda value, ctx: _to_decimal(value) is not None, "The {attribute} field must be a number.", cast=_to_decimal)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return isinstance(value, str) and bool(_INTEGER_RE.match(value))


def integer() -> Rule:
    return Rule(lambda value, ctx: _is_integer(value), "The {attribute} field must be an integer.", cast=lambda value: int(value))


def min_value(minimum: int | Decimal) -> Rule:
    return Rule(
        lambda value, ctx: value >= minimum,
        "The {attribute} field must be at least {min}.",
        params={"min": minimum},
    )


def max_value(maximum: int | Decimal) -> Rule:
    return Rule(
        lambda value, ctx: value <= maximum,
        "The {attribute} field must not be greater than {max}.",
        params={"max": maximum},
    )


def one_of(choices: Sequence[str]) -> Rule:
    return Rule(lambda value, ctx: value in choices, "The selected {attribute} is invalid.")


def unique(model: Any, column: str = "name") -> Rule:
    """Value must not already be stored in ``column``, ignoring ``ctx.ignore_id``."""

    def check(value: Any, ctx: RuleContext) -> bool:
        query = select(model.id).where(getattr(model, column) == value)
        if ctx.ignore_id is not None:
            query = query.where(model.id != ctx.ignore_id)
        return ctx.db.scalar(query.limit(1)) is None

    return Rule(check, "The {attribute} has already been taken.")


def exists(model: Any, column: str = "id") -> Rule:
    """Value must reference a stored row."""

    def check(value: Any, ctx: RuleContext) -> bool:
        if isinstance(value, int) and not fits_integer_column(value):
            return False
        query = select(model.id).where(getattr(model, column) == value)
        return ctx.db.scalar(query.limit(1)) is not None

    return Rule(check, "The selected {attribute} is invalid.")


def normalize_input(data: Mapping[str, Any]) -> dict[str, Any]:
    """Trim strings and treat blank strings as missing values."""
    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                value = None
        cleaned[key] = value
    return cleaned


def display_name(field_name: str) -> str:
    return field_name.replace("_", " ")


def validate(
    data: Any,
    rules: RuleTable,
    *,
    db: Session | None = None,
    ignore_id: int | None = None,
) -> dict[str, Any]:
    """Run ``rules`` against ``data`` and return the accepted values.

    Only fields named in the table and present in ``data`` are returned.
    Each field stops at its first failing rule. Raises
    ``FieldValidationError`` with every failing field at once.
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise FieldValidationError({"body": ["The request body must be a JSON object."]})

    payload = normalize_input(data)
    ctx = RuleContext(db=db, ignore_id=ignore_id)
    accepted: dict[str, Any] = {}
    errors: dict[str, list[str]] = {}

    for field_name, field_rules in rules.items():
        value = payload.get(field_name)
        failed = False
        for rule in field_rules:
            if value is None and not rule.implicit and not (rule.present and field_name in payload):
                continue
            if not rule.predicate(value, ctx):
                errors[field_name] = [rule.format(display_name(field_name))]
                failed = True
                break
            if rule.cast is not None:
                value = rule.cast(value)
        if not failed and field_name in payload:
            accepted[field_name] = value

    if errors:
        raise FieldValidationError(errors)
    return accepted
