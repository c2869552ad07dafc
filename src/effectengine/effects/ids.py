STATIC_ID_LENGTH = 16


def static_id(text: str) -> str:
    """Deterministic 16-character document id derived from ``text``."""

    if len(text) >= STATIC_ID_LENGTH:
        return text[:STATIC_ID_LENGTH]
    return text.ljust(STATIC_ID_LENGTH, "0")
