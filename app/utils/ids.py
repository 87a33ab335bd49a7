"""Identifier utilities."""

from __future__ import annotations


class InvalidIdentifierError(ValueError):
  """Raised when a record identifier is not a positive integer."""

  def __init__(self, field: str, value: object) -> None:
    super().__init__(f"{field} must be a positive integer, got {value!r}")
    self.field = field
    self.value = value


def require_id(value: object, field: str = "id") -> int:
  """Return the identifier unchanged, rejecting bools, non-ints and values below 1."""
  if isinstance(value, bool) or not isinstance(value, int) or value < 1:
    raise InvalidIdentifierError(field, value)
  return value
