"""
Credential encryption for platform access tokens stored on Store rows.
"""
import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from app.core.logging import get_logger

logger = get_logger(__name__)


def derive_fernet_key(secret: str) -> bytes:
    """Derive a Fernet-compatible key from the encryption key."""
    key = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key)


class TokenCipher:
    """Symmetric cipher for access credentials at rest."""

    def __init__(self, encryption_key: str) -> None:
        self._fernet = Fernet(derive_fernet_key(encryption_key))

    def encrypt(self, token: str) -> str:
        """Encrypt a token for secure storage."""
        return self._fernet.encrypt(token.encode()).decode()

    def decrypt(self, encrypted_token: str) -> str:
        """Decrypt a stored token."""
        try:
            return self._fernet.decrypt(encrypted_token.encode()).decode()
        except InvalidToken as e:
            logger.error("Failed to decrypt token", error=str(e))
            raise ValueError("Invalid encrypted token") from e
