"""Split a free-form guardian name into profile first/last names."""

from __future__ import annotations

from typing import Final

DEFAULT_FIRST_NAME: Final[str] = "Parent"


def split_guardian_name(
    guardian_name: str | None,
    *,
    fallback_last_name: str | None = None,
) -> tuple[str, str]:
    """Return ``(first_name, last_name)``.

    Rules:
    - whitespace runs separate parts; the first part is the first name and the
      rest, joined by single spaces, is the last name
    - a blank name yields ``DEFAULT_FIRST_NAME``
    - when no last name remains (single-word or blank name), the child's
      surname is used; if that is blank too the last name is empty
    """

    parts = (guardian_name or "").split()
    first_name = parts[0] if parts else DEFAULT_FIRST_NAME
    last_name = " ".join(parts[1:])
    if not last_name:
        last_name = (fallback_last_name or "").strip()
    return first_name, last_name
