"""
Password hashing for portal accounts.

Passwords are stored as base64(salt || key) where the salt is 32 random bytes
and the key is 32 bytes of PBKDF2-HMAC-SHA256 at 100,000 iterations. Django
prefixes the algorithm name so the value reads ``pbkdf2_sha256_salted$<blob>``.
"""
import base64
import hashlib
import secrets

from django.contrib.auth.hashers import BasePasswordHasher, mask_hash
from django.utils.crypto import constant_time_compare, pbkdf2

SALT_BYTES = 32
KEY_BYTES = 32
ITERATIONS = 100_000


def derive_key(password: str, salt: bytes) -> bytes:
    return pbkdf2(password, salt, ITERATIONS, dklen=KEY_BYTES, digest=hashlib.sha256)


def hash_password(password: str) -> str:
    """Return the bare base64(salt || key) blob for a password."""
    salt = secrets.token_bytes(SALT_BYTES)
    return base64.b64encode(salt + derive_key(password, salt)).decode('ascii')


def verify_password(password: str, blob: str) -> bool:
    """Check a password against a bare base64(salt || key) blob."""
    try:
        raw = base64.b64decode(blob, validate=True)
    except (ValueError, TypeError):
        return False
    if len(raw) != SALT_BYTES + KEY_BYTES:
        return False
    salt, expected = raw[:SALT_BYTES], raw[SALT_BYTES:]
    return constant_time_compare(derive_key(password, salt), expected)


class SaltedPBKDF2SHA256Hasher(BasePasswordHasher):
    """Django password hasher for the salt||key storage format."""
    algorithm = 'pbkdf2_sha256_salted'
    iterations = ITERATIONS

    def salt(self):
        return base64.b64encode(secrets.token_bytes(SALT_BYTES)).decode('ascii')

    def encode(self, password, salt):
        self._check_encode_args(password, salt)
        raw_salt = base64.b64decode(salt)
        blob = base64.b64encode(raw_salt + derive_key(password, raw_salt)).decode('ascii')
        return f"{self.algorithm}${blob}"

    def decode(self, encoded):
        algorithm, blob = encoded.split('$', 1)
        assert algorithm == self.algorithm
        raw = base64.b64decode(blob)
        return {
            'algorithm': algorithm,
            'blob': blob,
            'hash': base64.b64encode(raw[SALT_BYTES:]).decode('ascii'),
            'salt': base64.b64encode(raw[:SALT_BYTES]).decode('ascii'),
            'iterations': self.iterations,
        }

    def verify(self, password, encoded):
        decoded = self.decode(encoded)
        return verify_password(password, decoded['blob'])

    def safe_summary(self, encoded):
        decoded = self.decode(encoded)
        return {
            'algorithm': decoded['algorithm'],
            'iterations': decoded['iterations'],
            'salt': mask_hash(decoded['salt']),
            'hash': mask_hash(decoded['hash']),
        }

    def must_update(self, encoded):
        return False

    def harden_runtime(self, password, encoded):
        pass


def blob_from_encoded(encoded: str) -> str:
    """Strip the algorithm prefix from a stored password, if it is ours."""
    prefix = f"{SaltedPBKDF2SHA256Hasher.algorithm}$"
    if encoded and encoded.startswith(prefix):
        return encoded[len(prefix):]
    return ''


def encoded_from_blob(blob: str) -> str:
    return f"{SaltedPBKDF2SHA256Hasher.algorithm}${blob}"
