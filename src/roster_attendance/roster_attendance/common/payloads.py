"""Request body checks shared by controllers.

Bodies arrive as loose mappings (form or JSON); services only accept the
validated dataclasses built from them.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core.exceptions import ValidationError


def pick_fields(
    data: Mapping[str, Any] | None,
    *,
    required: Iterable[str],
    optional: Iterable[str] = (),
) -> dict[str, Any]:
    """Return only the declared fields; reject unknown or missing ones."""

    data = dict(data or {})
    required = tuple(required)
    allowed = set(required) | set(optional)

    unknown = sorted(k for k in data if k not in allowed)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")

    missing = [k for k in required if data.get(k) is None or str(data.get(k)).strip() == ""]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    return {k: data[k] for k in allowed if k in data}
