"""
Data models for awss3auth
"""

import os
from types import MappingProxyType
from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from typing import Callable, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, unquote, urlsplit

from .error import EncodingError, MissingCredentialError, SigningException

ALGORITHM = "AWS4-HMAC-SHA256"
SCOPE_TERMINATOR = "aws4_request"
DEFAULT_SERVICE = "s3"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
# SHA-256 of the empty string
EMPTY_PAYLOAD_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

QueryParams = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Credentials:
    """AWS S3 credentials resolved from an auth configuration."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    region: str
    session_token: Optional[str] = field(default=None, repr=False)

    def validate(self) -> None:
        """Raise if a required field is missing or empty."""
        for name in ("access_key_id", "secret_access_key", "region"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise MissingCredentialError(name)

    @classmethod
    def from_config(cls, config: Mapping[str, str]) -> "Credentials":
        """
        Build credentials from an auth method configuration.

        The configuration uses the auth method's storage keys: ``username``
        is the access key id, ``password`` the secret access key.
        """
        return cls(
            access_key_id=config.get("username", ""),
            secret_access_key=config.get("password", ""),
            region=config.get("region", ""),
            session_token=config.get("session_token") or None,
        )

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Credentials":
        """Build credentials from the standard AWS environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            access_key_id=env.get("AWS_ACCESS_KEY_ID", ""),
            secret_access_key=env.get("AWS_SECRET_ACCESS_KEY", ""),
            region=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION", ""),
            session_token=env.get("AWS_SESSION_TOKEN") or None,
        )


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SigningTime:
    """
    The single instant a signing operation is performed at.

    Both ``date`` and ``amz_date`` derive from ``instant``; capture it once
    and pass it down.
    """
    instant: datetime

    @classmethod
    def capture(cls, clock: Optional[Callable[[], datetime]] = None) -> "SigningTime":
        return cls.from_datetime((clock or _utcnow)())

    @classmethod
    def from_datetime(cls, value: datetime) -> "SigningTime":
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return cls(value.astimezone(UTC).replace(microsecond=0))

    @property
    def date(self) -> str:
        return self.instant.strftime("%Y%m%d")

    @property
    def amz_date(self) -> str:
        return self.instant.strftime("%Y%m%dT%H%M%SZ")


@dataclass(frozen=True)
class CredentialScope:
    """Date/region/service scope a derived signing key is valid for."""
    date: str
    region: str
    service: str = DEFAULT_SERVICE
    terminator: str = SCOPE_TERMINATOR

    @property
    def parts(self) -> Tuple[str, str, str, str]:
        return (self.date, self.region, self.service, self.terminator)

    def __str__(self) -> str:
        return "/".join(self.parts)


@dataclass(frozen=True)
class RequestDescriptor:
    """
    An HTTP request to be authenticated.

    ``path`` is the decoded request path; it is percent-encoded during
    canonicalization. ``payload_hash`` of ``None`` means the empty-payload
    constant, unless an ``X-Amz-Content-SHA256`` header is already present.
    """
    method: str
    host: str
    path: str = "/"
    query_params: QueryParams = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    payload_hash: Optional[str] = None
    scheme: str = "https"

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "query_params", tuple(
            (str(k), str(v)) for k, v in self.query_params
        ))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def __hash__(self):
        return hash((
            self.method,
            self.host,
            self.path,
            self.query_params,
            frozenset(self.headers.items()),
            self.payload_hash,
            self.scheme,
        ))

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        payload_hash: Optional[str] = None,
    ) -> "RequestDescriptor":
        """Build a descriptor from an absolute URL."""
        try:
            parts = urlsplit(url)
        except ValueError as ex:
            raise EncodingError(f"Malformed URL '{url}': {ex}")
        if not parts.scheme or not parts.netloc:
            raise EncodingError(f"URL '{url}' must be absolute with a scheme and host.")
        host = parts.netloc.rpartition("@")[2]
        return cls(
            method=method,
            host=host,
            path=unquote(parts.path) or "/",
            query_params=tuple(parse_qsl(parts.query, keep_blank_values=True)),
            headers=dict(headers or {}),
            payload_hash=payload_hash,
            scheme=parts.scheme,
        )

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def with_headers(self, updates: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with ``updates`` replacing same-named headers."""
        replaced = {name.lower() for name in updates}
        headers = {
            key: value for key, value in self.headers.items()
            if key.lower() not in replaced
        }
        headers.update(updates)
        return replace(self, headers=headers)


@dataclass(frozen=True)
class SignedRequest:
    """Header-mode signing result."""
    request: RequestDescriptor
    canonical_request: str
    string_to_sign: str
    signed_headers: str
    signature: str = field(repr=False)

    @property
    def headers(self) -> Mapping[str, str]:
        return self.request.headers


@dataclass(frozen=True)
class PresignedUrl:
    """Query-mode signing result."""
    url: str
    query_params: QueryParams
    canonical_request: str
    string_to_sign: str
    signature: str = field(repr=False)
    expires_in_seconds: int
    expires_at: datetime


@dataclass(frozen=True)
class SigningResult:
    """Outcome of a signing call: either a value or the error that prevented it."""
    value: Optional[Union[SignedRequest, PresignedUrl]] = None
    error: Optional[SigningException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Union[SignedRequest, PresignedUrl]:
        if self.error is not None:
            raise self.error
        return self.value
