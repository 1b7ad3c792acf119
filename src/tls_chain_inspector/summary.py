from __future__ import annotations

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import SignatureAlgorithmOID

from .models import CertSummary
from .utils import dt_to_utc_iso, sha256_hex


_SIG_ALG_NAMES = {
    SignatureAlgorithmOID.RSA_WITH_MD5: "MD5-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA1: "SHA1-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA224: "SHA224-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA256: "SHA256-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA384: "SHA384-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA512: "SHA512-RSA",
    SignatureAlgorithmOID.ECDSA_WITH_SHA1: "ECDSA-SHA1",
    SignatureAlgorithmOID.ECDSA_WITH_SHA224: "ECDSA-SHA224",
    SignatureAlgorithmOID.ECDSA_WITH_SHA256: "ECDSA-SHA256",
    SignatureAlgorithmOID.ECDSA_WITH_SHA384: "ECDSA-SHA384",
    SignatureAlgorithmOID.ECDSA_WITH_SHA512: "ECDSA-SHA512",
    SignatureAlgorithmOID.DSA_WITH_SHA1: "DSA-SHA1",
    SignatureAlgorithmOID.DSA_WITH_SHA256: "DSA-SHA256",
    SignatureAlgorithmOID.ED25519: "Ed25519",
    SignatureAlgorithmOID.ED448: "Ed448",
}


def _name_to_str(name: x509.Name) -> str:
    # RFC4514
    try:
        return name.rfc4514_string()
    except ValueError:
        return str(name)


def _get_san_dns(cert: x509.Certificate) -> list[str]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except (x509.ExtensionNotFound, ValueError):
        # absent, or the extensions block does not parse
        return []
    return list(ext.value.get_values_for_type(x509.DNSName))


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except (x509.ExtensionNotFound, ValueError):
        return False
    return bool(bc.ca)


def _sig_alg(cert: x509.Certificate) -> str:
    oid = cert.signature_algorithm_oid
    if oid == SignatureAlgorithmOID.RSASSA_PSS:
        hash_alg = cert.signature_hash_algorithm
        return f"{hash_alg.name.upper()}-RSAPSS" if hash_alg else "RSAPSS"
    return _SIG_ALG_NAMES.get(oid, oid.dotted_string)


def summarize_certificate(cert: x509.Certificate, *, include_dns_names: bool) -> CertSummary:
    der = cert.public_bytes(serialization.Encoding.DER)
    return CertSummary(
        subject=_name_to_str(cert.subject),
        issuer=_name_to_str(cert.issuer),
        not_before=dt_to_utc_iso(cert.not_valid_before_utc),
        not_after=dt_to_utc_iso(cert.not_valid_after_utc),
        is_ca=_is_ca(cert),
        signature_algorithm=_sig_alg(cert),
        sha256=sha256_hex(der),
        dns_names=_get_san_dns(cert) if include_dns_names else None,
    )


def summarize_chain(certs: list[x509.Certificate]) -> list[CertSummary]:
    """
    Project each presented certificate, keeping order. Only the leaf (index 0)
    carries its SAN DNS names.
    """
    return [summarize_certificate(c, include_dns_names=(i == 0)) for i, c in enumerate(certs)]
