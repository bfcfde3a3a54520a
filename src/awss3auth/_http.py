"""
httpx integration for awss3auth
"""

import hashlib
from typing import Generator

import httpx

from ._signer import CONTENT_SHA256_HEADER, AwsSignatureV4Signer
from .models import EMPTY_PAYLOAD_SHA256, UNSIGNED_PAYLOAD, RequestDescriptor


class S3SigV4Auth(httpx.Auth):
    """
    httpx auth that signs each outgoing request with an ``Authorization`` header.

    Works with both ``httpx.Client`` and ``httpx.AsyncClient``. Signing
    errors are raised, since an auth flow has nowhere to return them.

    Usage:

        auth = S3SigV4Auth(AwsSignatureV4Signer(credentials))
        httpx.get("https://bucket.s3.amazonaws.com/key.txt", auth=auth)
    """

    requires_request_body = True

    def __init__(self, signer: AwsSignatureV4Signer, unsigned_payload: bool = False):
        self.signer = signer
        self.unsigned_payload = unsigned_payload

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        signed = self.signer.sign(self.describe(request)).unwrap()
        for name, value in signed.headers.items():
            request.headers[name] = value
        yield request

    def describe(self, request: httpx.Request) -> RequestDescriptor:
        """Turn an httpx request into a request descriptor."""
        headers = {}
        payload_hash = None
        existing = request.headers.get(CONTENT_SHA256_HEADER)
        if existing:
            headers[CONTENT_SHA256_HEADER] = existing
        elif self.unsigned_payload:
            payload_hash = UNSIGNED_PAYLOAD
        elif request.content:
            payload_hash = hashlib.sha256(request.content).hexdigest()
        else:
            payload_hash = EMPTY_PAYLOAD_SHA256

        return RequestDescriptor(
            method=request.method,
            host=request.url.netloc.decode("ascii"),
            path=request.url.path,
            query_params=tuple(request.url.params.multi_items()),
            headers=headers,
            payload_hash=payload_hash,
            scheme=request.url.scheme,
        )
