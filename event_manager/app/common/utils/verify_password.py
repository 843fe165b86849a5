import random
import secrets
import string

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

# Argon2 password hashing
ph = PasswordHasher()

PASSWORD_SYMBOLS = "!@#$%^&*"


def hash_password(password: str) -> str:
    try:
        return ph.hash(password)
    except Exception as e:
        raise ValueError("Password hashing failed.") from e


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return ph.verify(hashed_password, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_strong_password(length: int = 12) -> str:
    # at least one of each class, then shuffle
    required = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(PASSWORD_SYMBOLS),
    ]
    pool = string.ascii_letters + string.digits + PASSWORD_SYMBOLS
    rest = [secrets.choice(pool) for _ in range(max(length, len(required)) - len(required))]
    chars = required + rest
    random.SystemRandom().shuffle(chars)
    return "".join(chars)


def generate_reset_code(length: int = 6) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))
