from __future__ import annotations

import hashlib
import ipaddress
from datetime import datetime, timezone
from urllib.parse import urlsplit


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def dt_to_utc_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _url_host(raw: str) -> str:
    try:
        netloc = urlsplit(raw).netloc
    except ValueError:
        return ""
    # drop userinfo, keep any explicit port
    return netloc.rpartition("@")[2]


def normalize_hostname(raw: str) -> str:
    """
    Reduce a hostname, host:port or URL (with or without scheme) to the host
    used for SNI and name matching.

    Input that yields no host either way is returned unchanged.
    """
    host = _url_host(raw)
    if host:
        return host
    host = _url_host("https://" + raw)
    if host:
        return host
    return raw


def is_ip_literal(value: str) -> bool:
    try:
        ipaddress.ip_address(value.strip("[]"))
    except ValueError:
        return False
    return True
