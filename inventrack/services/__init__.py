from inventrack.services.auth import (
    TokenPair,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    issue_token_pair,
    refresh_access_token,
    verify_password,
    verify_token,
)
from inventrack.services.movements import list_movements, record_movement

__all__ = [
    # auth
    "TokenPair",
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "hash_password",
    "issue_token_pair",
    "refresh_access_token",
    "verify_password",
    "verify_token",
    # movements
    "list_movements",
    "record_movement",
]
