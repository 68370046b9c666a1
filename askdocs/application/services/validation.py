"""Shared caller input checks for the services."""

from askdocs.core.exceptions import ClientInputError


def require_text(value: str | None, field: str, label: str) -> str:
    """
    Return a required string field, rejecting missing or blank values.

    Raises:
        ClientInputError: Value missing or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ClientInputError(f"{label} is required", field=field)
    return value
