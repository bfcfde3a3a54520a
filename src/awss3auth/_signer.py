"""
AWS Signature V4 signer for awss3auth
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from ._canonical import (
    canonical_headers,
    canonical_path,
    canonical_query_string,
    canonical_request,
    string_to_sign,
    uri_encode,
)
from ._signing_key import derive_signing_key, sign
from .error import ConfigurationError, EncodingError, SigningException
from .models import (
    ALGORITHM,
    DEFAULT_SERVICE,
    EMPTY_PAYLOAD_SHA256,
    UNSIGNED_PAYLOAD,
    Credentials,
    CredentialScope,
    PresignedUrl,
    QueryParams,
    RequestDescriptor,
    SignedRequest,
    SigningResult,
    SigningTime,
)

logger = logging.getLogger(__name__)

CONTENT_SHA256_HEADER = "X-Amz-Content-SHA256"
SECURITY_TOKEN_HEADER = "X-Amz-Security-Token"
DEFAULT_EXPIRES_IN_SECONDS = 300
MAX_EXPIRES_IN_SECONDS = 604800


class AwsSignatureV4Signer:
    """
    Signs requests for an S3-compatible store using AWS Signature Version 4.

    Header mode (``sign``) adds ``Host``, ``X-Amz-Date``,
    ``X-Amz-Content-SHA256`` and ``Authorization`` to a copy of the request.
    Query mode (``presign``) produces a presigned URL. Both return a
    ``SigningResult`` instead of raising.

    The signer holds no mutable state and may be shared between threads.
    """

    def __init__(
        self,
        credentials: Credentials,
        service: str = DEFAULT_SERVICE,
        expires_in_seconds: int = DEFAULT_EXPIRES_IN_SECONDS,
        sign_security_token: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.credentials = credentials
        self.service = service
        self.expires_in_seconds = expires_in_seconds
        self.sign_security_token = sign_security_token
        self._clock = clock

    def sign(
        self,
        request: RequestDescriptor,
        timestamp: Optional[datetime] = None,
    ) -> SigningResult:
        """Sign ``request`` with an ``Authorization`` header."""
        try:
            signed = self._sign_headers(request, self._signing_time(timestamp))
        except SigningException as ex:
            logger.warning("[awss3auth][Sign] rejected %s %s%s: %s", request.method, request.host, request.path, ex)
            return SigningResult(error=ex)
        return SigningResult(value=signed)

    def presign(
        self,
        request: RequestDescriptor,
        expires_in_seconds: Optional[int] = None,
        timestamp: Optional[datetime] = None,
    ) -> SigningResult:
        """Generate a presigned URL for ``request``."""
        try:
            presigned = self._presign(request, expires_in_seconds, self._signing_time(timestamp))
        except SigningException as ex:
            logger.warning("[awss3auth][PresignedUrl] rejected %s %s%s: %s", request.method, request.host, request.path, ex)
            return SigningResult(error=ex)

        logger.info(
            "[awss3auth][PresignedUrl] host=%s path=%s expirySeconds=%s",
            request.host,
            request.path,
            presigned.expires_in_seconds,
        )
        return SigningResult(value=presigned)

    def credential_scope(self, signing_time: SigningTime) -> CredentialScope:
        return CredentialScope(signing_time.date, self.credentials.region, self.service)

    def _signing_time(self, timestamp: Optional[datetime]) -> SigningTime:
        if timestamp is not None:
            return SigningTime.from_datetime(timestamp)
        return SigningTime.capture(self._clock)

    def _validate(self, request: RequestDescriptor) -> None:
        self.credentials.validate()
        for name, value in (("region", self.credentials.region), ("service", self.service)):
            if not value or not value.isascii():
                raise ConfigurationError(f"The {name} '{value}' must be a non-empty ASCII token.")
        if not request.host:
            raise EncodingError("Request host is empty.")

    def _validate_expiry(self, expires_in_seconds: int) -> int:
        if isinstance(expires_in_seconds, bool) or not isinstance(expires_in_seconds, int):
            raise ConfigurationError(
                f"Expiry must be a whole number of seconds, got {expires_in_seconds!r}."
            )
        if expires_in_seconds < 1 or expires_in_seconds > MAX_EXPIRES_IN_SECONDS:
            raise ConfigurationError(
                f"Expiry must be between 1 second and {MAX_EXPIRES_IN_SECONDS} seconds (7 days)."
            )
        return expires_in_seconds

    def _signed_token(self) -> Optional[str]:
        if self.sign_security_token:
            return self.credentials.session_token
        return None

    def _unsigned_token(self) -> Optional[str]:
        if not self.sign_security_token:
            return self.credentials.session_token
        return None

    def _redact(self, request_text: str) -> str:
        """Mask the session token in both its header and query-encoded forms."""
        token = self.credentials.session_token
        if not token:
            return request_text
        for form in (uri_encode(token), token):
            request_text = request_text.replace(form, "<redacted>")
        return request_text

    def _signature(self, signing_time: SigningTime, request_text: str) -> Tuple[str, str]:
        scope = self.credential_scope(signing_time)
        to_sign = string_to_sign(signing_time.amz_date, scope, request_text)
        logger.debug("[awss3auth] canonical request:\n%s", self._redact(request_text))
        logger.debug("[awss3auth] string to sign:\n%s", to_sign)
        signing_key = derive_signing_key(self.credentials.secret_access_key, scope)
        return to_sign, sign(signing_key, to_sign)

    def _sign_headers(self, request: RequestDescriptor, signing_time: SigningTime) -> SignedRequest:
        self._validate(request)

        payload_hash = (
            request.payload_hash
            or request.header(CONTENT_SHA256_HEADER)
            or EMPTY_PAYLOAD_SHA256
        )
        signing_headers: Dict[str, str] = {
            "Host": request.host,
            "X-Amz-Date": signing_time.amz_date,
            CONTENT_SHA256_HEADER: payload_hash,
        }
        token = self._signed_token()
        if token:
            signing_headers[SECURITY_TOKEN_HEADER] = token

        header_block, signed_headers = canonical_headers(signing_headers, list(signing_headers))
        request_text = canonical_request(
            request.method,
            request.path,
            canonical_query_string(request.query_params),
            header_block,
            signed_headers,
            payload_hash,
        )
        to_sign, signature = self._signature(signing_time, request_text)

        scope = self.credential_scope(signing_time)
        added = dict(signing_headers)
        added["Authorization"] = (
            f"{ALGORITHM} Credential={self.credentials.access_key_id}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
        unsigned_token = self._unsigned_token()
        if unsigned_token:
            added[SECURITY_TOKEN_HEADER] = unsigned_token

        return SignedRequest(
            request=request.with_headers(added),
            canonical_request=request_text,
            string_to_sign=to_sign,
            signed_headers=signed_headers,
            signature=signature,
        )

    def _presign(
        self,
        request: RequestDescriptor,
        expires_in_seconds: Optional[int],
        signing_time: SigningTime,
    ) -> PresignedUrl:
        self._validate(request)
        expiry = self._validate_expiry(
            self.expires_in_seconds if expires_in_seconds is None else expires_in_seconds
        )

        scope = self.credential_scope(signing_time)
        header_block, signed_headers = canonical_headers({"host": request.host}, ["host"])

        signing_params: List[Tuple[str, str]] = [
            ("X-Amz-Algorithm", ALGORITHM),
            ("X-Amz-Credential", f"{self.credentials.access_key_id}/{scope}"),
            ("X-Amz-Date", signing_time.amz_date),
            ("X-Amz-Expires", str(expiry)),
        ]
        token = self._signed_token()
        if token:
            signing_params.append(("X-Amz-Security-Token", token))
        signing_params.append(("X-Amz-SignedHeaders", signed_headers))

        request_text = canonical_request(
            request.method,
            request.path,
            canonical_query_string(request.query_params + tuple(signing_params)),
            header_block,
            signed_headers,
            UNSIGNED_PAYLOAD,
        )
        to_sign, signature = self._signature(signing_time, request_text)

        params: QueryParams = request.query_params + tuple(signing_params) + (("X-Amz-Signature", signature),)
        unsigned_token = self._unsigned_token()
        if unsigned_token:
            params += (("X-Amz-Security-Token", unsigned_token),)

        query_string = "&".join(f"{uri_encode(k)}={uri_encode(v)}" for k, v in params)
        url = f"{request.scheme}://{request.host}{canonical_path(request.path)}?{query_string}"

        return PresignedUrl(
            url=url,
            query_params=params,
            canonical_request=request_text,
            string_to_sign=to_sign,
            signature=signature,
            expires_in_seconds=expiry,
            expires_at=signing_time.instant + timedelta(seconds=expiry),
        )
