"""
VaxLedger Vaccination Engine — Application Service
====================================================
The ledger's public API.

Mutations:
    register_provider, approve_provider, record_vaccination,
    update_record_verification

Reads:
    verify_vaccine_record, get_patient_vaccine_records,
    is_batch_number_used, get_total_records, get_provider, authority,
    events, verify_integrity

Every mutation flows:
    request → Command → CommandBus (validation + policies)
            → handler → persist_event → LedgerState.apply → subscribers

A rejected command raises the matching LedgerError and leaves no event.
One re-entrant lock covers every mutation and every read, so a reader
always sees a state that some prefix of accepted mutations produced.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from core.commands.base import Command
from core.commands.bus import CommandBus
from core.commands.dispatcher import CommandDispatcher
from core.context.actor_context import (
    ActorContext,
    CallerLike,
    is_null_identity,
    resolve_actor,
)
from core.event_store.hashing.verifier import (
    ChainVerificationResult,
    verify_event_chain,
)
from core.event_store.persistence.errors import EventPersistenceError
from core.event_store.persistence.memory import InMemoryEventStore
from core.event_store.persistence.service import (
    EventStoreProtocol,
    persist_event,
)
from core.event_store.validators.registry import EventTypeRegistry
from core.events.registry import SubscriberRegistry
from core.replay.event_replayer import replay_events
from core.time.clock import Clock, SystemClock
from engines.vaccination.commands import (
    VACCINATION_COMMAND_TYPES,
    LedgerInitializeRequest,
    ProviderApproveRequest,
    ProviderRegisterRequest,
    RecordCreateRequest,
    RecordVerificationUpdateRequest,
)
from engines.vaccination.errors import (
    LedgerStateError,
    NotFound,
    NotVerified,
    Unauthorized,
    raise_for_rejection,
)
from engines.vaccination.events import (
    build_event_data,
    build_ledger_initialized_payload,
    build_provider_approved_payload,
    build_provider_registered_payload,
    build_record_verification_updated_payload,
    build_vaccine_recorded_payload,
    register_vaccination_event_types,
    resolve_vaccination_event_type,
)
from engines.vaccination.models import HealthcareProvider, VaccineRecord
from engines.vaccination.policies import VACCINATION_POLICIES
from engines.vaccination.state import LedgerState

logger = logging.getLogger("vaxledger.vaccination")


# ══════════════════════════════════════════════════════════════
# PAYLOAD DISPATCHER
# ══════════════════════════════════════════════════════════════

PAYLOAD_BUILDERS = {
    "vaccination.ledger.initialize.request": build_ledger_initialized_payload,
    "vaccination.provider.register.request": build_provider_registered_payload,
    "vaccination.provider.approve.request": build_provider_approved_payload,
    "vaccination.record.create.request": build_vaccine_recorded_payload,
    "vaccination.record.verification_update.request": (
        build_record_verification_updated_payload
    ),
}


# ══════════════════════════════════════════════════════════════
# EXECUTION RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VaccinationExecutionResult:
    event_type: str
    payload: dict
    event: Any


# ══════════════════════════════════════════════════════════════
# COMMAND HANDLER
# ══════════════════════════════════════════════════════════════

class _VaccinationCommandHandler:
    def __init__(self, service: "VaccinationLedgerService"):
        self._service = service

    def execute(self, command: Command) -> VaccinationExecutionResult:
        return self._service._execute_command(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class VaccinationLedgerService:
    """
    One vaccination ledger over one event chain.

    Usage:
        ledger = VaccinationLedgerService(authority_id="0xA11CE...")
        ledger.register_provider("0xB0B...", "City Clinic", "LIC-42")
        ledger.approve_provider("0xA11CE...", "0xB0B...")
        record_id = ledger.record_vaccination("0xB0B...", ...)

    Built over an empty store, the service writes the genesis event
    naming authority_id. Built over a populated store, it replays the
    chain; authority_id may then be omitted, and if given it must match
    the recorded authority.
    """

    def __init__(
        self,
        authority_id: Optional[CallerLike] = None,
        *,
        clock: Optional[Clock] = None,
        event_store: Optional[EventStoreProtocol] = None,
        ledger_id: Optional[uuid.UUID] = None,
        event_type_registry: Optional[EventTypeRegistry] = None,
        subscriber_registry: Optional[SubscriberRegistry] = None,
    ):
        if event_store is None:
            event_store = InMemoryEventStore(ledger_id=ledger_id)
        elif ledger_id is not None and ledger_id != event_store.ledger_id:
            raise LedgerStateError(
                f"ledger_id {ledger_id} does not match event store "
                f"ledger {event_store.ledger_id}."
            )

        self._clock = clock or SystemClock()
        self._event_store = event_store
        self._event_type_registry = event_type_registry or EventTypeRegistry()
        self._subscriber_registry = subscriber_registry or SubscriberRegistry()
        self._state = LedgerState(ledger_id=event_store.ledger_id)
        self._lock = threading.RLock()

        register_vaccination_event_types(self._event_type_registry)

        dispatcher = CommandDispatcher(context=self._state)
        for policy in VACCINATION_POLICIES:
            dispatcher.register_policy(policy)
        self._command_bus = CommandBus(dispatcher=dispatcher)
        self._register_handlers()

        self._bootstrap(authority_id)

    def _register_handlers(self) -> None:
        handler = _VaccinationCommandHandler(self)
        for command_type in sorted(VACCINATION_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _bootstrap(self, authority_id: Optional[CallerLike]) -> None:
        existing = self._event_store.load_events()

        if not existing:
            if authority_id is None:
                raise LedgerStateError(
                    "authority_id is required to initialize an empty ledger."
                )
            self._submit(authority_id, LedgerInitializeRequest())
            logger.info(
                f"Ledger {self.ledger_id} initialized with authority "
                f"{self._state.authority}"
            )
            return

        replay_events(existing, self._state, ledger_id=self.ledger_id)

        if not self._state.is_initialized:
            raise LedgerStateError(
                f"Ledger {self.ledger_id} has events but no genesis."
            )

        if authority_id is not None:
            actor = self._resolve_caller(authority_id)
            if actor.actor_id != self._state.authority:
                raise LedgerStateError(
                    f"Ledger {self.ledger_id} authority is "
                    f"{self._state.authority}, not {actor.actor_id}."
                )

        logger.info(
            f"Ledger {self.ledger_id} rebuilt from {len(existing)} events"
        )

    # ══════════════════════════════════════════════════════════
    # COMMAND EXECUTION
    # ══════════════════════════════════════════════════════════

    @staticmethod
    def _resolve_caller(caller: CallerLike) -> ActorContext:
        if not isinstance(caller, ActorContext) and (
            not isinstance(caller, str) or is_null_identity(caller)
        ):
            raise Unauthorized("Caller identity is missing.")
        return resolve_actor(caller)

    def _submit(self, caller: CallerLike, request) -> VaccinationExecutionResult:
        actor = self._resolve_caller(caller)

        with self._lock:
            command = request.to_command(
                ledger_id=self.ledger_id,
                actor_id=actor.actor_id,
                command_id=uuid.uuid4(),
                correlation_id=uuid.uuid4(),
                issued_at=self._clock.now_utc(),
            )
            result = self._command_bus.handle(command)
            if result.is_rejected:
                raise_for_rejection(result.reason)
            return result.execution_result

    def _execute_command(self, command: Command) -> VaccinationExecutionResult:
        event_type = resolve_vaccination_event_type(command.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported vaccination command type: {command.command_type}"
            )

        builder = PAYLOAD_BUILDERS.get(command.command_type)
        if builder is None:
            raise ValueError(f"No payload builder for: {command.command_type}")

        payload = builder(command, self._state)
        event_data = build_event_data(
            command=command,
            event_type=event_type,
            payload=payload,
        )

        with self._event_store.atomic():
            persist_result = persist_event(
                event_data,
                self._event_store,
                self._event_type_registry,
                self._subscriber_registry,
            )
            if not persist_result.accepted:
                logger.error(
                    f"Event store refused {event_type} for command "
                    f"{command.command_id}: {persist_result.rejection.message}"
                )
                raise EventPersistenceError(persist_result.rejection)

            stored = persist_result.event
            self._state.apply(event_type, stored.payload)

            return VaccinationExecutionResult(
                event_type=event_type,
                payload=copy.deepcopy(stored.payload),
                event=stored,
            )

    # ══════════════════════════════════════════════════════════
    # PROVIDER REGISTRY
    # ══════════════════════════════════════════════════════════

    def register_provider(
        self,
        caller: CallerLike,
        provider_name: str,
        license_number: str,
    ) -> None:
        """
        Register the caller as an unapproved provider.

        Raises:
            InvalidInput:      provider_name or license_number empty.
            AlreadyRegistered: the caller already has a profile.
        """
        self._submit(
            caller,
            ProviderRegisterRequest(
                provider_name=provider_name,
                license_number=license_number,
            ),
        )

    def approve_provider(self, caller: CallerLike, provider_address: str) -> None:
        """
        Approve a registered provider. Authority only; idempotent.

        Raises:
            Unauthorized: caller is not the authority.
            NotFound:     no profile for provider_address.
        """
        self._submit(
            caller,
            ProviderApproveRequest(provider_address=provider_address),
        )

    def get_provider(self, provider_address: str) -> HealthcareProvider:
        with self._lock:
            provider = self._state.get_provider(provider_address)
        if provider is None:
            raise NotFound(f"Provider {provider_address} is not registered.")
        return provider

    # ══════════════════════════════════════════════════════════
    # RECORD STORE
    # ══════════════════════════════════════════════════════════

    def record_vaccination(
        self,
        caller: CallerLike,
        patient_address: str,
        patient_name: str,
        vaccine_name: str,
        manufacturer: str,
        batch_number: str,
        location: str,
    ) -> int:
        """
        Record a vaccination administered by the calling provider.

        The record starts verified, both of its dates are the clock
        reading of this call, and the batch number is marked used.
        Reusing a batch number is allowed.

        Returns:
            The new record id (previous total + 1).

        Raises:
            Unauthorized: caller is not an approved provider.
            InvalidInput: null patient, or empty patient_name,
                          vaccine_name or batch_number.
        """
        result = self._submit(
            caller,
            RecordCreateRequest(
                patient_address=patient_address,
                patient_name=patient_name,
                vaccine_name=vaccine_name,
                manufacturer=manufacturer,
                batch_number=batch_number,
                location=location,
            ),
        )
        return result.payload["record_id"]

    def verify_vaccine_record(self, record_id: int) -> VaccineRecord:
        """
        Return a record only if it exists and is verified.

        Raises:
            NotFound:    record_id outside [1, total records].
            NotVerified: the record's verification flag is off.
        """
        with self._lock:
            exists = (
                isinstance(record_id, int)
                and not isinstance(record_id, bool)
                and self._state.record_exists(record_id)
            )
            record = self._state.get_record(record_id) if exists else None

        if record is None:
            raise NotFound(f"Record {record_id} does not exist.")
        if not record.is_verified:
            raise NotVerified(f"Record {record_id} is not verified.")
        return record

    def get_patient_vaccine_records(self, patient_address: str) -> Tuple[int, ...]:
        with self._lock:
            return self._state.patient_record_ids(patient_address)

    def get_total_records(self) -> int:
        with self._lock:
            return self._state.record_counter

    # ══════════════════════════════════════════════════════════
    # BATCH TRACKER
    # ══════════════════════════════════════════════════════════

    def is_batch_number_used(self, batch_number: str) -> bool:
        with self._lock:
            return self._state.is_batch_number_used(batch_number)

    # ══════════════════════════════════════════════════════════
    # AUTHORITY
    # ══════════════════════════════════════════════════════════

    def update_record_verification(
        self,
        caller: CallerLike,
        record_id: int,
        status: bool,
    ) -> None:
        """
        Set a record's verification flag. Authority only.

        Raises:
            Unauthorized: caller is not the authority.
            NotFound:     record_id outside [1, total records].
        """
        self._submit(
            caller,
            RecordVerificationUpdateRequest(record_id=record_id, status=status),
        )

    @property
    def authority(self) -> str:
        with self._lock:
            return self._state.authority

    # ══════════════════════════════════════════════════════════
    # CHAIN AND AUDIT
    # ══════════════════════════════════════════════════════════

    @property
    def ledger_id(self) -> uuid.UUID:
        return self._event_store.ledger_id

    def events(self) -> tuple:
        """Stored events in chain order."""
        with self._lock:
            return self._event_store.load_events()

    def verify_integrity(self) -> ChainVerificationResult:
        with self._lock:
            result = verify_event_chain(self._event_store.load_events())
        if not result.valid:
            logger.error(
                f"Ledger {self.ledger_id} failed integrity check at "
                f"sequence {result.failed_sequence}: {result.detail}"
            )
        return result

    def subscribe(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str = "audit",
    ) -> None:
        self._subscriber_registry.register_subscriber(
            event_type, handler, subscriber_engine,
        )
