"""Admin key generation, credential extraction and password hashing."""

import secrets
import uuid
from collections.abc import Mapping

import bcrypt

GET_USAGE_HINT = "Add ?x-admin-key=<your_key> to your URL"
HEADER_USAGE_HINT = "Include x-admin-key header or Authorization: Bearer <key>"

QUERY_PARAM_NAMES = ("x-admin-key", "admin_key")


def generate_key_id() -> str:
    """Generate an opaque, unique admin key identifier."""
    return f"key-{uuid.uuid4().hex}"


def generate_secret(prefix: str = "admin_key_") -> str:
    """
    Generate an unguessable admin key secret.

    Args:
        prefix: Recognizable prefix for the credential

    Returns:
        Prefix followed by 32 hex characters from ``secrets``
    """
    return f"{prefix}{secrets.token_hex(16)}"


def usage_hint(method: str) -> str:
    """Explain how to supply the credential for a request method."""
    return GET_USAGE_HINT if method.upper() == "GET" else HEADER_USAGE_HINT


def extract_credential(
    headers: Mapping[str, str],
    query_params: Mapping[str, str],
    method: str,
) -> str | None:
    """
    Extract the presented admin key from a request.

    Checks the ``x-admin-key`` header, then ``Authorization: Bearer <key>``,
    then, for GET requests only, the ``x-admin-key`` / ``admin_key`` query
    parameters. Headers take precedence.

    Args:
        headers: Request headers (case-insensitive mapping)
        query_params: Request query parameters
        method: HTTP method

    Returns:
        The credential string, or None if nothing was presented
    """
    credential = (headers.get("x-admin-key") or "").strip()
    if credential:
        return credential

    authorization = (headers.get("authorization") or "").strip()
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]

    if method.upper() == "GET":
        for name in QUERY_PARAM_NAMES:
            credential = (query_params.get(name) or "").strip()
            if credential:
                return credential

    return None


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")
