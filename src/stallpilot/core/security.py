"""PIN hashing and verification utilities."""

from pwdlib import PasswordHash

# Argon2 (modern, GPU-resistant)
pin_hash = PasswordHash.recommended()


def verify_pin(plain_pin: str, hashed_pin: str) -> bool:
    """Verify plain PIN against its hash."""
    return pin_hash.verify(plain_pin, hashed_pin)


def hash_pin(pin: str) -> str:
    """Hash a PIN using Argon2."""
    return pin_hash.hash(pin)
