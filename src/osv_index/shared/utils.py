from __future__ import annotations

import hashlib

from ..core.domain.models import Digests


def compute_digests(data: bytes) -> Digests:
    """SHA-256/384/512 hex digests of a raw document, recorded with each ingested advisory."""
    return Digests(
        sha256=hashlib.sha256(data).hexdigest(),
        sha384=hashlib.sha384(data).hexdigest(),
        sha512=hashlib.sha512(data).hexdigest(),
    )
