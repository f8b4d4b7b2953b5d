"""Argon2id hashing for user passwords and API keys.

Both kinds of secret share one hasher so the cost parameters are tuned in a
single place. Verification never raises: anything other than a clean match is
reported as ``False``.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher()

_REJECTIONS = (VerifyMismatchError, VerificationError, InvalidHashError)


def hash_password(password: str) -> str:
    """Return an encoded ``$argon2id$...`` hash of ``password``."""
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext secret against a stored hash.

    Args:
        password: Secret presented by the caller.
        hashed: Stored Argon2 hash. A corrupt value counts as a mismatch.

    Returns:
        True only when the secret matches.
    """
    try:
        return _hasher.verify(hashed, password)
    except _REJECTIONS:
        return False


def needs_rehash(hashed: str) -> bool:
    return _hasher.check_needs_rehash(hashed)
