from __future__ import annotations

import logging
import selectors
import socket
import time

from OpenSSL import SSL

from .errors import ConnectError, NoCertificatesError
from .models import PresentedChain
from .utils import is_ip_literal

logger = logging.getLogger(__name__)

DEFAULT_TLS_PORT = 443
DEFAULT_CONNECT_TIMEOUT = 5


def _client_context() -> SSL.Context:
    ctx = SSL.Context(SSL.TLS_CLIENT_METHOD)
    # capture the chain whatever its state; verification happens afterwards
    ctx.set_verify(SSL.VERIFY_NONE)
    return ctx


def _handshake(conn: SSL.Connection, sock: socket.socket, deadline: float) -> None:
    while True:
        try:
            conn.do_handshake()
            return
        except (SSL.WantReadError, SSL.WantWriteError) as e:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("TLS handshake timed out") from e
            events = selectors.EVENT_READ if isinstance(e, SSL.WantReadError) else selectors.EVENT_WRITE
            with selectors.DefaultSelector() as selector:
                selector.register(sock, events)
                ready = selector.select(remaining)
            if not ready:
                raise socket.timeout("TLS handshake timed out") from e


def fetch_presented_chain(
    ip: str,
    sni: str,
    *,
    port: int = DEFAULT_TLS_PORT,
    timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT,
) -> PresentedChain:
    """
    Handshake with ip:port presenting `sni` and return every certificate the
    peer sent, leaf first.

    Peer verification is disabled so that expired, mismatched or untrusted
    chains are still captured. Raises ConnectError on any transport or
    handshake failure and NoCertificatesError if the peer sent nothing.
    """
    host = ip.strip("[]")
    deadline = time.monotonic() + timeout_seconds
    logger.debug(f"Connecting to {host}:{port} (sni={sni!r}, timeout={timeout_seconds}s)")

    try:
        with socket.create_connection((host, port), timeout=timeout_seconds) as sock:
            conn = SSL.Connection(_client_context(), sock)
            if sni and not is_ip_literal(sni):
                conn.set_tlsext_host_name(sni.encode("idna"))
            conn.set_connect_state()
            _handshake(conn, sock, deadline)

            tls_version = conn.get_protocol_version_name()
            cipher = conn.get_cipher_name()
            certs = conn.get_peer_cert_chain(as_cryptography=True) or []
    except (OSError, SSL.Error, UnicodeError) as e:
        message = str(e) or e.__class__.__name__
        logger.warning(f"TLS connection to {host}:{port} failed: {message}")
        raise ConnectError(message) from e

    if not certs:
        logger.warning(f"{host}:{port} completed the handshake without presenting certificates")
        raise NoCertificatesError("Server did not provide any certificates.")

    logger.debug(f"{host}:{port} presented {len(certs)} certificate(s) over {tls_version}")
    return PresentedChain(certs=certs, tls_version=tls_version, cipher=cipher)
