"""Password hashing compatible with the stored `<hex digest>.<hex salt>` format."""

from __future__ import annotations

import hashlib
import secrets

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_BYTES = 64


def _derive(password: str, salt: str) -> bytes:
  return hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P, dklen=SCRYPT_KEY_BYTES)


def hash_password(password: str) -> str:
  """Hash a password with a fresh random salt."""
  salt = secrets.token_hex(16)
  return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
  """Check a plain password against a stored hash; malformed hashes never match."""
  digest, sep, salt = stored.partition(".")
  if not sep or not digest or not salt:
    return False

  try:
    expected = bytes.fromhex(digest)
  except ValueError:
    return False

  return secrets.compare_digest(_derive(password, salt), expected)
