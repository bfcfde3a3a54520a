"""
Signing key derivation for AWS Signature V4.
"""

import hashlib
import hmac
from functools import reduce

from .models import CredentialScope


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_access_key: str, scope: CredentialScope) -> bytes:
    """
    Derive the request-scoped signing key.

    The secret seeds the chain; each of date, region, service and the
    terminator is then signed with the previous step's raw digest.
    """
    seed = ("AWS4" + secret_access_key).encode("utf-8")
    return reduce(hmac_sha256, scope.parts, seed)


def sign(signing_key: bytes, string_to_sign: str) -> str:
    """Return the lowercase hex signature of ``string_to_sign``."""
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()
