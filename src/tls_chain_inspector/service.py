from __future__ import annotations

import logging

from .config import Settings, settings as default_settings
from .fetch import fetch_presented_chain
from .models import ChainReport, Target
from .summary import summarize_chain
from .utils import normalize_hostname
from .verify import load_trust_store, validate_chain

logger = logging.getLogger(__name__)


def inspect_target(ip: str, url: str, *, settings: Settings | None = None) -> ChainReport:
    """
    Capture the chain `ip` presents for the host named by `url` and
    re-validate it.

    ConnectError, NoCertificatesError and TrustStoreError propagate; an
    untrusted or mismatched chain is reported in the verdict instead.
    """
    settings = settings or default_settings
    target = Target(ip=ip, hostname=normalize_hostname(url))
    logger.info(f"Inspecting {target.ip} as {target.hostname!r}")

    chain = fetch_presented_chain(
        target.ip,
        target.hostname,
        port=settings.TLS_PORT,
        timeout_seconds=settings.CONNECT_TIMEOUT,
    )
    store = load_trust_store(settings.TRUST_STORE)
    verdict = validate_chain(chain.certs, target.hostname, store=store)
    logger.info(f"{target.ip} as {target.hostname!r}: {verdict.message}")

    return ChainReport(
        target_url=f"https://{target.hostname}",
        certificates=summarize_chain(chain.certs),
        verdict=verdict,
        tls={"version": chain.tls_version, "cipher": chain.cipher},
    )
