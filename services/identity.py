from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import TOKEN_MAX_AGE, TOKEN_SALT, TOKEN_SECRET
from playlistkit.utils.logger import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Returns the token from an ``Authorization: Bearer <token>`` header, or None."""
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


class SignedTokenVerifier:
    """Stands in for the external identity provider.

    Tokens are timestamp-signed subject ids; ``verify`` answers with the
    subject, or None when the token is malformed, tampered with or expired.
    """

    def __init__(self, secret: str = TOKEN_SECRET, max_age: int = TOKEN_MAX_AGE, salt: str = TOKEN_SALT):
        self._serializer = URLSafeTimedSerializer(secret, salt=salt)
        self.max_age = max_age

    def issue(self, subject: str) -> str:
        if not subject:
            raise ValueError("subject required")
        return self._serializer.dumps({"sub": subject})

    def verify(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.debug("Rejected expired token")
            return None
        except BadSignature:
            logger.debug("Rejected token with bad signature")
            return None
        subject = payload.get("sub") if isinstance(payload, dict) else None
        return subject if isinstance(subject, str) and subject else None
