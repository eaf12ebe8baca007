import uuid


def generate_token() -> str:
    """Generate a new message token.

    Uses a random (version 4) UUID, i.e. 122 bits from the operating
    system's cryptographically secure source. Message tokens double as
    the only credential needed to read a message, so they must never be
    derived from anything predictable.

    Returns:
        Canonical hyphenated UUID string.
    """
    return str(uuid.uuid4())
