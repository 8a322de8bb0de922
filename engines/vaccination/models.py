"""
VaxLedger Vaccination Engine — Ledger Models
==============================================
Frozen value objects held by the ledger state.

HealthcareProvider and VaccineRecord are never edited in place.
The two permitted changes (provider approval, record verification
flag) produce a new object via replace(); every other field is fixed
at creation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


# ══════════════════════════════════════════════════════════════
# HEALTHCARE PROVIDER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HealthcareProvider:
    """
    Registration profile of one provider identity.

    Lifecycle: registered (is_approved=False) → approved. There is no
    operation that revokes approval.
    """

    provider_address: str
    provider_name: str
    license_number: str
    is_approved: bool
    registration_date: datetime

    def approve(self) -> HealthcareProvider:
        return replace(self, is_approved=True)


# ══════════════════════════════════════════════════════════════
# VACCINE RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VaccineRecord:
    """
    One vaccination event.

    vaccination_date and timestamp are the same clock reading at
    creation. Only is_verified may change afterwards, and only through
    the authority.
    """

    record_id: int
    patient_address: str
    patient_name: str
    vaccine_name: str
    manufacturer: str
    batch_number: str
    location: str
    vaccination_date: datetime
    timestamp: datetime
    healthcare_provider: str
    is_verified: bool

    def with_verification(self, status: bool) -> VaccineRecord:
        return replace(self, is_verified=status)
