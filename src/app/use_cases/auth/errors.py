"""
Error codes of the auth use cases.

Codes in UNAUTHORIZED_CODES mean the presented credential cannot be used;
the API layer answers them with 401.
"""

INVALID_TOKEN = "INVALID_TOKEN"
SESSION_REVOKED = "SESSION_REVOKED"
SESSION_EXPIRED = "SESSION_EXPIRED"
SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

# Token verification failures (TokenCodec.verify)
TOKEN_MALFORMED = "TOKEN_MALFORMED"
TOKEN_EXPIRED = "TOKEN_EXPIRED"
INVALID_SIGNATURE = "INVALID_SIGNATURE"

UNAUTHORIZED_CODES = frozenset(
    {
        INVALID_TOKEN,
        SESSION_REVOKED,
        SESSION_EXPIRED,
        TOKEN_MALFORMED,
        TOKEN_EXPIRED,
        INVALID_SIGNATURE,
    }
)
