from __future__ import annotations


class InspectorError(Exception):
    """Base class for failures that abort an inspection."""


class ConnectError(InspectorError):
    """TCP connect or TLS handshake to the target failed."""


class NoCertificatesError(InspectorError):
    """Handshake completed but the peer presented no certificates."""


class TrustStoreError(InspectorError):
    """The root certificate store could not be loaded."""
