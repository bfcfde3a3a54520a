"""
awss3auth - AWS Signature V4 request signing for S3-compatible stores
"""

__version__ = "1.0.0"

from ._http import S3SigV4Auth
from ._signer import AwsSignatureV4Signer
from ._signing_key import derive_signing_key
from .client import S3AuthMethod
from .credentials import CredentialCache
from .models import (
    EMPTY_PAYLOAD_SHA256,
    UNSIGNED_PAYLOAD,
    Credentials,
    CredentialScope,
    PresignedUrl,
    RequestDescriptor,
    SignedRequest,
    SigningResult,
    SigningTime,
)
from .error import (
    SigningException,
    ConfigurationError,
    MissingCredentialError,
    UnknownAuthConfigError,
    EncodingError,
)

__all__ = [
    "AwsSignatureV4Signer",
    "S3AuthMethod",
    "S3SigV4Auth",
    "CredentialCache",
    "derive_signing_key",
    "EMPTY_PAYLOAD_SHA256",
    "UNSIGNED_PAYLOAD",
    "Credentials",
    "CredentialScope",
    "PresignedUrl",
    "RequestDescriptor",
    "SignedRequest",
    "SigningResult",
    "SigningTime",
    "SigningException",
    "ConfigurationError",
    "MissingCredentialError",
    "UnknownAuthConfigError",
    "EncodingError",
]
