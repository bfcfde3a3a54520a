"""
Canonical request and string-to-sign construction for AWS Signature V4.
"""

import hashlib
from typing import Iterable, Mapping, Sequence, Tuple
from urllib.parse import quote

from .error import EncodingError
from .models import ALGORITHM, CredentialScope


def uri_encode(value: str, safe: str = "") -> str:
    """Percent-encode ``value`` as UTF-8, keeping only unreserved characters and ``safe``."""
    try:
        return quote(value.encode("utf-8"), safe=safe)
    except UnicodeEncodeError as ex:
        raise EncodingError(f"Cannot percent-encode {value!r}: {ex.reason}")


def canonical_path(path: str) -> str:
    """Encode every path segment, leaving the ``/`` separators alone."""
    if path and not path.startswith("/"):
        raise EncodingError(f"Request path '{path}' must be absolute.")
    return uri_encode(path, safe="/") or "/"


def canonical_query_string(params: Iterable[Tuple[str, str]]) -> str:
    encoded = sorted(
        (uri_encode(key), uri_encode(value)) for key, value in params
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def canonical_header_value(value: str) -> str:
    if "\n" in value or "\r" in value:
        raise EncodingError("Header values must not contain line breaks.")
    return " ".join(value.split())


def canonical_headers(headers: Mapping[str, str], signed: Sequence[str]) -> Tuple[str, str]:
    """
    Return the canonical header block and the signed-header list.

    Only headers named in ``signed`` take part; names are matched
    case-insensitively and emitted lowercase in sorted order.
    """
    lowered = {name.lower(): value for name, value in headers.items()}
    names = sorted(name.lower() for name in signed)
    lines = []
    for name in names:
        if name not in lowered:
            raise EncodingError(f"Signed header '{name}' is missing from the request.")
        lines.append(f"{name}:{canonical_header_value(lowered[name])}\n")
    return "".join(lines), ";".join(names)


def canonical_request(
    method: str,
    path: str,
    query: str,
    header_block: str,
    signed_headers: str,
    payload_hash: str,
) -> str:
    return "\n".join([
        method,
        canonical_path(path),
        query,
        header_block,
        signed_headers,
        payload_hash,
    ])


def string_to_sign(amz_date: str, scope: CredentialScope, request: str) -> str:
    request_hash = hashlib.sha256(request.encode("utf-8")).hexdigest()
    return "\n".join([
        ALGORITHM,
        amz_date,
        str(scope),
        request_hash,
    ])
