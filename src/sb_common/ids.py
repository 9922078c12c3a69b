"""Identifier helpers.

Users and bets are keyed by UUIDs generated in PostgreSQL (gen_random_uuid()).
Path parameters arrive as strings; anything that does not parse as a UUID
cannot name an existing row and is treated as "not found" by repositories.
"""

import uuid


def parse_uuid(value: object) -> uuid.UUID | None:
    """Parse a UUID from str/UUID. Returns None when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None
