import uuid

# Fixed namespace so that the same external key always maps to the same point
UUID_NAMESPACE = uuid.UUID("da0ac261-2851-4934-a405-a1df024749cb")


def point_id(key: str) -> uuid.UUID:
    return uuid.uuid5(UUID_NAMESPACE, key)


def decode_body(raw: bytes) -> str:
    """Request bodies carry plain UTF-8 text; anything else is a caller error."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Request body is not valid UTF-8 text (byte {e.start})") from e
