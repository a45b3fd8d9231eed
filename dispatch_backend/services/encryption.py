from functools import lru_cache
from cryptography.fernet import Fernet, InvalidToken
from ..config import get_settings


@lru_cache
def _get_fernet() -> Fernet:
    settings = get_settings()
    if not settings.FIELD_ENCRYPTION_KEY:
        raise RuntimeError("FIELD_ENCRYPTION_KEY is not set")
    return Fernet(settings.FIELD_ENCRYPTION_KEY.encode("utf-8"))


def reset_fernet() -> None:
    _get_fernet.cache_clear()


def encrypt_value(value: str) -> str:
    if value == "":
        return value
    return _get_fernet().encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_value(value: str) -> str:
    if value == "":
        return value
    try:
        return _get_fernet().decrypt(value.encode("utf-8")).decode("utf-8")
    except InvalidToken as exc:
        raise RuntimeError("Decryption failed: invalid token") from exc
