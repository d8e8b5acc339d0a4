"""
Participant record shape and row mapping helpers.

The API accepts a nested body (`participant` / `work` / `home` facets) and the
store keeps one flat row per participant keyed by `email`. This module owns the
translation in both directions so repositories and routes agree on column order
and JSON types.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel
from pydantic.functional_validators import field_validator

# Facet -> fields, in the order they are validated and stored.
FACETS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("participant", ("email", "firstname", "lastname", "dob")),
    ("work", ("companyname", "salary", "currency")),
    ("home", ("country", "city")),
)

COLUMNS: Tuple[str, ...] = tuple(name for _, fields in FACETS for name in fields)
# Columns rewritten by a full update; email is the immutable key.
UPDATE_COLUMNS: Tuple[str, ...] = tuple(c for c in COLUMNS if c != "email")

SUMMARY_COLUMNS = ("firstname", "lastname", "email")
DETAIL_COLUMNS = ("firstname", "lastname", "dob")
WORK_COLUMNS = ("companyName", "salary", "currency")
HOME_COLUMNS = ("country", "city")


class ParticipantRecord(BaseModel):
    """Typed, flat participant row used as statement parameters.

    Carries no constraints of its own: `validate_participant_body` decides
    validity, this model only coerces dob and salary.
    """

    email: str
    firstname: str
    lastname: str
    dob: date
    companyname: str
    salary: Decimal
    currency: str
    country: str
    city: str

    @field_validator("salary", mode="before")
    @classmethod
    def _coerce_salary(cls, v):
        return parse_salary(v)

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ParticipantRecord":
        """Build a record from an already validated nested body."""
        return cls.model_validate(flatten_body(body))

    def params(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, column) for column in COLUMNS)

    def update_params(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, column) for column in UPDATE_COLUMNS)


def flatten_body(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the nine fields of a nested body as submitted (no coercion)."""
    flat: Dict[str, Any] = {}
    for facet, fields in FACETS:
        section = body.get(facet) or {}
        for name in fields:
            flat[name] = section.get(name)
    return flat


def parse_salary(value: Any) -> Decimal:
    """Coerce a submitted salary to Decimal; raise ValueError when not numeric.

    Accepts ints, floats and numeric strings (surrounding whitespace ignored).
    Booleans, empty strings and non-finite values are rejected. No range check:
    zero and negative salaries are valid.
    """
    if isinstance(value, bool):
        raise ValueError("salary_not_numeric")
    if isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        raise ValueError("salary_not_numeric")
    try:
        number = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError("salary_not_numeric") from exc
    if not number.is_finite():
        raise ValueError("salary_not_numeric")
    return number


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def row_to_dict(row: Tuple, columns: Tuple[str, ...]) -> Dict[str, Any]:
    """Zip a positional DB row with its column names, converting to JSON types."""
    return {name: _jsonable(value) for name, value in zip(columns, row)}


__all__ = [
    "FACETS",
    "COLUMNS",
    "UPDATE_COLUMNS",
    "SUMMARY_COLUMNS",
    "DETAIL_COLUMNS",
    "WORK_COLUMNS",
    "HOME_COLUMNS",
    "ParticipantRecord",
    "flatten_body",
    "parse_salary",
    "row_to_dict",
]
