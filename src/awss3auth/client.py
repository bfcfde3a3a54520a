"""
S3AuthMethod - AWS S3 request signing keyed by auth configuration id
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from ._http import S3SigV4Auth
from ._signer import DEFAULT_EXPIRES_IN_SECONDS, AwsSignatureV4Signer
from .credentials import CredentialCache, CredentialLoader
from .error import EncodingError, SigningException, UnknownAuthConfigError
from .models import DEFAULT_SERVICE, Credentials, RequestDescriptor, SigningResult

logger = logging.getLogger(__name__)

VSICURL_PREFIX = "/vsicurl/"


class S3AuthMethod:
    """
    Signs S3 requests and data source URIs for stored auth configurations.

    Credentials are resolved through ``loader`` (the credential store) and
    kept in ``cache`` until ``clear_cached_config`` is called.

    Example:
        method = S3AuthMethod(loader=store.load)

        result = method.update_request(
            RequestDescriptor("GET", "bucket.s3.amazonaws.com", "/key.txt"),
            authcfg="abc1234",
        )
        if result.ok:
            headers = result.value.headers
    """

    AUTH_METHOD_KEY = "AWSS3"
    AUTH_METHOD_DESCRIPTION = "AWS S3"
    DATA_PROVIDERS = ("awss3", "ogr", "gdal")

    def __init__(
        self,
        loader: CredentialLoader,
        cache: Optional[CredentialCache] = None,
        service: str = DEFAULT_SERVICE,
        expires_in_seconds: int = DEFAULT_EXPIRES_IN_SECONDS,
        sign_security_token: bool = True,
        unsigned_payload: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize S3AuthMethod.

        Args:
            loader: Resolves an auth configuration id to credentials
            cache: Credential cache, shared between methods if given
            service: Service name used in the credential scope
            expires_in_seconds: Default lifetime of presigned URLs
            sign_security_token: Include the session token in the signature
            unsigned_payload: Send UNSIGNED-PAYLOAD from the httpx auth
            clock: Returns the current UTC time
        """
        self._loader = loader
        self.cache = cache if cache is not None else CredentialCache()
        self.service = service
        self.expires_in_seconds = expires_in_seconds
        self.sign_security_token = sign_security_token
        self.unsigned_payload = unsigned_payload
        self._clock = clock

    def key(self) -> str:
        return self.AUTH_METHOD_KEY

    def description(self) -> str:
        return self.AUTH_METHOD_DESCRIPTION

    def get_credentials(self, authcfg: str) -> Optional[Credentials]:
        return self.cache.get_or_load(authcfg, self._loader)

    def signer(self, authcfg: str) -> AwsSignatureV4Signer:
        """Return a signer for ``authcfg``; raises if it cannot be resolved."""
        credentials = self.get_credentials(authcfg)
        if credentials is None:
            raise UnknownAuthConfigError(authcfg)
        return AwsSignatureV4Signer(
            credentials,
            service=self.service,
            expires_in_seconds=self.expires_in_seconds,
            sign_security_token=self.sign_security_token,
            clock=self._clock,
        )

    def update_request(self, request: RequestDescriptor, authcfg: str) -> SigningResult:
        """Sign ``request`` with an Authorization header."""
        try:
            signer = self.signer(authcfg)
        except SigningException as ex:
            logger.warning("Update request config FAILED for authcfg: %s: %s", authcfg, ex)
            return SigningResult(error=ex)
        return signer.sign(request)

    def presigned_url(
        self,
        method: str,
        url: str,
        authcfg: str,
        expires_in_seconds: Optional[int] = None,
    ) -> SigningResult:
        """Generate a presigned URL for ``method`` on ``url``."""
        try:
            signer = self.signer(authcfg)
            request = RequestDescriptor.from_url(method, url)
        except SigningException as ex:
            logger.warning("Presigned URL FAILED for authcfg: %s: %s", authcfg, ex)
            return SigningResult(error=ex)
        return signer.presign(request, expires_in_seconds)

    def update_data_source_uri(self, uri: str, authcfg: str) -> SigningResult:
        """
        Presign a data source URI for GET access.

        A leading ``/vsicurl/`` prefix is kept on the result but not signed.
        """
        if not uri:
            error = EncodingError("Data source URI is empty.")
            logger.warning("Update URI items FAILED for authcfg: %s: %s", authcfg, error)
            return SigningResult(error=error)

        prefix = VSICURL_PREFIX if uri.startswith(VSICURL_PREFIX) else ""
        result = self.presigned_url("GET", uri[len(prefix):], authcfg)
        if not result.ok or not prefix:
            return result
        return SigningResult(value=replace(result.value, url=prefix + result.value.url))

    def auth(self, authcfg: str) -> S3SigV4Auth:
        """Return an httpx auth signing requests for ``authcfg``."""
        return S3SigV4Auth(self.signer(authcfg), unsigned_payload=self.unsigned_payload)

    def clear_cached_config(self, authcfg: str) -> None:
        self.cache.invalidate(authcfg)
