"""Authenticated caller representation."""
from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    """
    Identity verified from a bearer token.

    ``id`` is the identity provider's ``sub`` claim and is the only value used
    to scope storage keys.
    """

    id: str
    email: str | None = None
