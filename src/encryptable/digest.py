import hashlib
import hmac

from encryptable.core.ports.services import DigestFunction


def hmac_sha256(key: str) -> DigestFunction:
    """Digest callable producing the lowercase hex HMAC-SHA256 of its input under ``key``."""
    secret = key.encode("utf-8")

    def digest(data: str) -> str:
        return hmac.new(secret, data.encode("utf-8"), hashlib.sha256).hexdigest()

    digest.__qualname__ = "hmac_sha256"
    return digest
