from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cryptography import x509


VALID_CHAIN_MESSAGE = "Certificate chain is valid."
INVALID_CHAIN_PREFIX = "Certificate chain verification failed: "


@dataclass(frozen=True)
class Target:
    ip: str
    hostname: str  # normalized, may still carry an explicit port


@dataclass(frozen=True)
class PresentedChain:
    """
    Server-presented chain: leaf first, then intermediates in the order sent.
    """
    certs: list[x509.Certificate]
    tls_version: str | None = None
    cipher: str | None = None

    @property
    def leaf(self) -> x509.Certificate:
        return self.certs[0]

    @property
    def intermediates(self) -> list[x509.Certificate]:
        return self.certs[1:]


@dataclass(frozen=True)
class CertSummary:
    """
    Public projection of one presented certificate.
    """
    subject: str
    issuer: str
    not_before: str  # ISO-8601 UTC string
    not_after: str   # ISO-8601 UTC string
    is_ca: bool
    signature_algorithm: str
    sha256: str
    dns_names: list[str] | None = None  # leaf only

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "subject": self.subject,
            "issuer": self.issuer,
            "not_before": self.not_before,
            "not_after": self.not_after,
        }
        if self.dns_names:
            out["dns_names"] = list(self.dns_names)
        out["is_ca"] = self.is_ca
        out["signature_algorithm"] = self.signature_algorithm
        out["sha256"] = self.sha256
        return out


@dataclass(frozen=True)
class ValidationVerdict:
    valid: bool
    message: str

    @classmethod
    def ok(cls) -> ValidationVerdict:
        return cls(valid=True, message=VALID_CHAIN_MESSAGE)

    @classmethod
    def failed(cls, reason: str) -> ValidationVerdict:
        return cls(valid=False, message=INVALID_CHAIN_PREFIX + reason)


@dataclass
class ChainReport:
    target_url: str
    certificates: list[CertSummary]
    verdict: ValidationVerdict
    tls: dict[str, Any] = field(default_factory=dict)

    @property
    def chain_validation_message(self) -> str:
        return self.verdict.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_url": self.target_url,
            "certificates": [c.to_dict() for c in self.certificates],
            "chain_validation_message": self.chain_validation_message,
        }
