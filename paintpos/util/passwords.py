import hashlib
import hmac
import secrets

SALT_BYTES = 16


def generate_salt() -> str:
    return secrets.token_hex(SALT_BYTES)


def hash_password(plain: str | None, hex_salt: str) -> str:
    # sha256(salt bytes + utf-8 password), hex encoded
    data = bytes.fromhex(hex_salt or "") + (plain or "").encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def password_matches(plain: str | None, expected_hash: str | None, hex_salt: str | None) -> bool:
    if not expected_hash or hex_salt is None:
        return False
    return hmac.compare_digest(expected_hash, hash_password(plain, hex_salt))
