from passlib.hash import argon2


def hash_password(password: str) -> str:
    return argon2.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return argon2.verify(password, password_hash)
    except ValueError:
        # not an argon2 hash
        return False
