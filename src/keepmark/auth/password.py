"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (rounds=12) takes ~100ms per hash on modern hardware,
so callers in async code run these through a threadpool.
"""

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the password.
_MAX_PASSWORD_BYTES = 72

_dummy_hashes: dict[int, bytes] = {}


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Two calls with the same password
    give two different hashes.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Never raises on bad input."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def dummy_verify(password: str, rounds: int = DEFAULT_ROUNDS) -> bool:
    """Burn one verification against a throwaway hash.

    Learn: Sign-in for an unknown email calls this so it costs the same
    bcrypt work as a wrong password for a real account. Always False.
    """
    dummy = _dummy_hashes.get(rounds)
    if dummy is None:
        dummy = bcrypt.hashpw(b"keepmark-dummy-password", bcrypt.gensalt(rounds=rounds))
        _dummy_hashes[rounds] = dummy
    bcrypt.checkpw(_encode(password), dummy)
    return False
