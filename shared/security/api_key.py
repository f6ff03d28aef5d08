import secrets


def verify_api_key(provided_key: str | None, expected_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key or not expected_key:
        return False
    return secrets.compare_digest(str(provided_key), str(expected_key))
