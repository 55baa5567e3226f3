"""Authenticated identity resolved from a bearer token."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """A verified login identity.

    An identity is the cross-company login account; it may hold roles in
    several companies through its memberships.

    Attributes:
        user_id: Identity ID (UUID string).
        email: Login email address.
    """

    user_id: str
    email: str
