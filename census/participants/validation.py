"""
Participant body validation.

Why:
    Create and full update must reject bad input before any statement reaches
    the database, and clients should see every problem in one response rather
    than fixing fields one round-trip at a time.

Behavior:
    - Structural check first: the body must be an object holding the
      `participant`, `work` and `home` objects. Missing facets are all listed
      together and field checks are skipped.
    - Presence of each of the nine fields is reported independently.
    - Type and format checks run only for fields that are present.
    - Never touches storage.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List

from census.participants.domain import FACETS, parse_salary

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
DOB_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _is_missing(name: str, value: Any) -> bool:
    if value is None:
        return True
    # salary may legitimately be 0; only strings can be "empty"
    if name != "salary" and value == "":
        return True
    return False


def validate_participant_body(body: Any) -> ValidationResult:
    """Validate a nested participant body, returning all errors in order."""
    if not isinstance(body, dict):
        return ValidationResult(valid=False, errors=["Body must be a JSON object"])

    errors: List[str] = []
    for facet, _ in FACETS:
        if not isinstance(body.get(facet), dict):
            errors.append(f'Missing "{facet}" object')
    if errors:
        return ValidationResult(valid=False, errors=errors)

    present: dict[str, Any] = {}
    for facet, fields in FACETS:
        section = body[facet]
        for name in fields:
            value = section.get(name)
            if _is_missing(name, value):
                errors.append(f"{facet}.{name} is required")
                continue
            if name != "salary" and not isinstance(value, str):
                errors.append(f"{facet}.{name} must be a string")
                continue
            present[name] = value

    email = present.get("email")
    if email is not None and not EMAIL_RE.fullmatch(email):
        errors.append("participant.email must be a valid email address")

    dob = present.get("dob")
    if dob is not None:
        if not DOB_RE.fullmatch(dob):
            errors.append("participant.dob must be in format YYYY-MM-DD")
        else:
            try:
                datetime.strptime(dob, "%Y-%m-%d")
            except ValueError:
                errors.append("participant.dob is not a valid date")

    if "salary" in present:
        try:
            parse_salary(present["salary"])
        except ValueError:
            errors.append("work.salary must be a number")

    return ValidationResult(valid=not errors, errors=errors)


__all__ = ["ValidationResult", "validate_participant_body", "EMAIL_RE", "DOB_RE"]
