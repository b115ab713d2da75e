"""Parity Verifier - old/new ticket comparison."""

from rehome.verifier.models import FIELDS, Finding, VerificationReport
from rehome.verifier.verifier import ParityVerifier, compare_tickets, normalize_body

__all__ = [
    "FIELDS",
    "Finding",
    "ParityVerifier",
    "VerificationReport",
    "compare_tickets",
    "normalize_body",
]
