"""
VaxLedger Vaccination Engine — Ledger State
=============================================
The projection every ledger read is answered from.

LedgerState is rebuilt from events and nothing else:
- apply(event_type, payload) is the only mutator
- the service applies each event right after it is persisted
- replay applies the stored chain to a fresh instance

It also serves as the command context: policies read it, the
dispatcher checks commands against its ledger_id.

apply() checks that each event is consistent with the state it lands
on (record ids contiguous, providers known, one genesis). A stored
chain that fails these checks raises LedgerStateError.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from engines.vaccination.errors import LedgerStateError
from engines.vaccination.events import (
    VACCINATION_LEDGER_INITIALIZED_V1,
    VACCINATION_PROVIDER_APPROVED_V1,
    VACCINATION_PROVIDER_REGISTERED_V1,
    VACCINATION_RECORD_RECORDED_V1,
    VACCINATION_RECORD_VERIFICATION_UPDATED_V1,
)
from engines.vaccination.models import HealthcareProvider, VaccineRecord


class LedgerState:
    """In-memory projection of one vaccination ledger."""

    def __init__(self, ledger_id: uuid.UUID):
        self._ledger_id = ledger_id
        self._authority: Optional[str] = None
        self._initialized_at: Optional[datetime] = None
        self._providers: Dict[str, HealthcareProvider] = {}
        self._records: Dict[int, VaccineRecord] = {}
        self._record_counter = 0
        self._patient_records: Dict[str, List[int]] = {}
        self._batch_numbers_used: set = set()
        self._event_count = 0

    def get_ledger_id(self) -> uuid.UUID:
        return self._ledger_id

    # ══════════════════════════════════════════════════════════
    # PROJECTION
    # ══════════════════════════════════════════════════════════

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type == VACCINATION_LEDGER_INITIALIZED_V1:
            self._apply_initialized(payload)
        elif event_type == VACCINATION_PROVIDER_REGISTERED_V1:
            self._apply_provider_registered(payload)
        elif event_type == VACCINATION_PROVIDER_APPROVED_V1:
            self._apply_provider_approved(payload)
        elif event_type == VACCINATION_RECORD_RECORDED_V1:
            self._apply_vaccine_recorded(payload)
        elif event_type == VACCINATION_RECORD_VERIFICATION_UPDATED_V1:
            self._apply_verification_updated(payload)
        else:
            raise LedgerStateError(f"Unknown event type '{event_type}'.")

        self._event_count += 1

    def _apply_initialized(self, payload: dict) -> None:
        if self._authority is not None:
            raise LedgerStateError("Ledger is already initialized.")
        self._authority = payload["authority_id"]
        self._initialized_at = datetime.fromisoformat(payload["initialized_at"])

    def _apply_provider_registered(self, payload: dict) -> None:
        address = payload["provider_address"]
        if address in self._providers:
            raise LedgerStateError(f"Provider {address} registered twice.")
        self._providers[address] = HealthcareProvider(
            provider_address=address,
            provider_name=payload["provider_name"],
            license_number=payload["license_number"],
            is_approved=False,
            registration_date=datetime.fromisoformat(
                payload["registration_date"]
            ),
        )

    def _apply_provider_approved(self, payload: dict) -> None:
        address = payload["provider_address"]
        provider = self._providers.get(address)
        if provider is None:
            raise LedgerStateError(f"Approval for unknown provider {address}.")
        self._providers[address] = provider.approve()

    def _apply_vaccine_recorded(self, payload: dict) -> None:
        record_id = payload["record_id"]
        if record_id != self.next_record_id:
            raise LedgerStateError(
                f"Record id {record_id} out of order "
                f"(expected {self.next_record_id})."
            )

        record = VaccineRecord(
            record_id=record_id,
            patient_address=payload["patient_address"],
            patient_name=payload["patient_name"],
            vaccine_name=payload["vaccine_name"],
            manufacturer=payload["manufacturer"],
            batch_number=payload["batch_number"],
            location=payload["location"],
            vaccination_date=datetime.fromisoformat(payload["vaccination_date"]),
            timestamp=datetime.fromisoformat(payload["timestamp"]),
            healthcare_provider=payload["healthcare_provider"],
            is_verified=True,
        )
        self._record_counter = record_id
        self._records[record_id] = record
        self._patient_records.setdefault(record.patient_address, []).append(
            record_id
        )
        self._batch_numbers_used.add(record.batch_number)

    def _apply_verification_updated(self, payload: dict) -> None:
        record_id = payload["record_id"]
        record = self._records.get(record_id)
        if record is None:
            raise LedgerStateError(
                f"Verification update for unknown record {record_id}."
            )
        self._records[record_id] = record.with_verification(
            payload["is_verified"]
        )

    # ══════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════

    @property
    def authority(self) -> Optional[str]:
        return self._authority

    @property
    def initialized_at(self) -> Optional[datetime]:
        return self._initialized_at

    @property
    def is_initialized(self) -> bool:
        return self._authority is not None

    def is_authority(self, actor_id: str) -> bool:
        return self._authority is not None and actor_id == self._authority

    def get_provider(self, address: str) -> Optional[HealthcareProvider]:
        return self._providers.get(address)

    def is_approved_provider(self, address: str) -> bool:
        provider = self._providers.get(address)
        return provider is not None and provider.is_approved

    @property
    def record_counter(self) -> int:
        return self._record_counter

    @property
    def next_record_id(self) -> int:
        return self._record_counter + 1

    def record_exists(self, record_id: int) -> bool:
        return 1 <= record_id <= self._record_counter

    def get_record(self, record_id: int) -> Optional[VaccineRecord]:
        return self._records.get(record_id)

    def patient_record_ids(self, patient_address: str) -> Tuple[int, ...]:
        return tuple(self._patient_records.get(patient_address, ()))

    def is_batch_number_used(self, batch_number: str) -> bool:
        return batch_number in self._batch_numbers_used

    @property
    def event_count(self) -> int:
        return self._event_count
