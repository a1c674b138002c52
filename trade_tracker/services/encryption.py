"""Fernet encryption for the Gist token kept in local storage."""

from cryptography.fernet import Fernet, InvalidToken

from trade_tracker.config import settings

# Keyed by the configured key so a changed setting takes effect
_fernets: dict[str, Fernet] = {}


def _get_fernet() -> Fernet:
    key = settings.encryption_key
    if not key:
        raise RuntimeError(
            "TT_ENCRYPTION_KEY not set. Generate one with: "
            "python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\""
        )
    if key not in _fernets:
        _fernets[key] = Fernet(key.encode())
    return _fernets[key]


def encrypt_token(token: str) -> str:
    """Encrypt an API token for storage."""
    return _get_fernet().encrypt(token.encode()).decode()


def decrypt_token(ciphertext: str) -> str:
    """Decrypt a stored API token.

    Raises ValueError when the ciphertext was written with a different key.
    """
    try:
        return _get_fernet().decrypt(ciphertext.encode()).decode()
    except InvalidToken as e:
        raise ValueError("Stored token cannot be decrypted with the current TT_ENCRYPTION_KEY") from e
