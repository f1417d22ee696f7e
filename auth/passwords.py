import secrets

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    return generate_password_hash(password, method="pbkdf2:sha256", salt_length=16)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    return check_password_hash(stored, password)


def random_password_hash() -> str:
    """게스트 계정용: 아무도 모르는 비밀번호의 해시"""
    return hash_password(secrets.token_urlsafe(32))
