from __future__ import annotations

import functools
import ipaddress
import logging
import ssl
from pathlib import Path

import certifi
from cryptography import x509
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from .errors import TrustStoreError
from .models import ValidationVerdict
from .utils import is_ip_literal

logger = logging.getLogger(__name__)

TRUST_STORES = ("system", "mozilla")


def _load_pem_file(path: Path) -> list[x509.Certificate]:
    try:
        return x509.load_pem_x509_certificates(path.read_bytes())
    except (OSError, ValueError) as e:
        logger.debug(f"Skipping unreadable CA file {path}: {e}")
        return []


def _system_roots() -> list[x509.Certificate]:
    paths = ssl.get_default_verify_paths()
    if paths.cafile and Path(paths.cafile).is_file():
        return _load_pem_file(Path(paths.cafile))

    roots: list[x509.Certificate] = []
    if paths.capath and Path(paths.capath).is_dir():
        for entry in sorted(Path(paths.capath).iterdir()):
            if entry.is_file():
                roots.extend(_load_pem_file(entry))
    # the directory holds hash links and bundles alongside the individual files
    return list(dict.fromkeys(roots))


@functools.lru_cache(maxsize=None)
def load_trust_store(source: str = "system") -> Store:
    """
    Build the root store used as trust anchors.

    "system" reads OpenSSL's default CA file or directory, "mozilla" reads
    the certifi bundle. The result is immutable and loaded once per source.
    """
    if source == "system":
        roots = _system_roots()
    elif source == "mozilla":
        roots = _load_pem_file(Path(certifi.where()))
    else:
        raise TrustStoreError(f"unknown trust store {source!r}; expected one of {', '.join(TRUST_STORES)}")

    if not roots:
        raise TrustStoreError(f"no root certificates found in the {source} trust store")

    logger.info(f"Loaded {len(roots)} root certificates from the {source} trust store")
    return Store(roots)


def _subject_for(hostname: str) -> x509.DNSName | x509.IPAddress:
    if is_ip_literal(hostname):
        return x509.IPAddress(ipaddress.ip_address(hostname.strip("[]")))
    # match on the A-label, the form sent as SNI
    return x509.DNSName(hostname.encode("idna").decode("ascii"))


def validate_chain(
    certs: list[x509.Certificate],
    hostname: str,
    *,
    store: Store | None = None,
) -> ValidationVerdict:
    """
    Verify the leaf against the trust anchors using only the peer-supplied
    intermediates (certs[1:]) and check it is valid for `hostname` now.

    Failures are returned as an invalid verdict carrying the verifier's
    reason. Nothing here touches the network.
    """
    if not certs:
        raise ValueError("cannot validate an empty certificate chain")

    leaf, intermediates = certs[0], list(certs[1:])
    if store is None:
        store = load_trust_store()

    try:
        verifier = PolicyBuilder().store(store).build_server_verifier(_subject_for(hostname))
        verifier.verify(leaf, intermediates)
    except VerificationError as e:
        logger.info(f"Chain verification for {hostname!r} failed: {e}")
        return ValidationVerdict.failed(str(e))
    except ValueError as e:
        # hostname not usable as a DNS name or IP subject (UnicodeError included)
        logger.info(f"Chain verification for {hostname!r} failed: {e}")
        return ValidationVerdict.failed(str(e))

    return ValidationVerdict.ok()
