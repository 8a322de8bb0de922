"""
VaxLedger Vaccination Engine — Request and Policy Tests
=========================================================
Requests build canonical Commands; policies decide against a
LedgerState without touching it.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from core.commands.dispatcher import CommandDispatcher
from core.commands.rejection import ReasonCode
from engines.vaccination.commands import (
    VACCINATION_RECORD_CREATE_REQUEST,
    LedgerInitializeRequest,
    ProviderApproveRequest,
    ProviderRegisterRequest,
    RecordCreateRequest,
    RecordVerificationUpdateRequest,
)
from engines.vaccination.errors import InvalidInput, LedgerStateError
from engines.vaccination.policies import (
    VACCINATION_POLICIES,
    approved_provider_policy,
    authority_only_policy,
    ledger_initialization_policy,
    patient_address_policy,
    provider_exists_policy,
    provider_not_registered_policy,
    record_exists_policy,
    required_fields_policy,
)
from engines.vaccination.state import LedgerState


LEDGER_ID = uuid.uuid4()
NOW = datetime(2026, 2, 19, 12, 0, tzinfo=timezone.utc)
AUTHORITY = "0xA11CE"
PROVIDER = "0xB0B"
PATIENT = "0xPA7"


def _to_command(request, actor_id: str = AUTHORITY):
    return request.to_command(
        ledger_id=LEDGER_ID,
        actor_id=actor_id,
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=NOW,
    )


def _record_request(**overrides) -> RecordCreateRequest:
    fields = dict(
        patient_address=PATIENT,
        patient_name="Alice",
        vaccine_name="VaxX",
        manufacturer="Mfr",
        batch_number="B001",
        location="NYC",
    )
    fields.update(overrides)
    return RecordCreateRequest(**fields)


def _state(*, approved: bool = False, records: int = 0) -> LedgerState:
    """Build state through apply(), the same way the service does."""
    state = LedgerState(ledger_id=LEDGER_ID)
    stamp = NOW.isoformat()
    state.apply("vaccination.ledger.initialized.v1", {
        "authority_id": AUTHORITY, "initialized_at": stamp,
    })
    state.apply("vaccination.provider.registered.v1", {
        "provider_address": PROVIDER,
        "provider_name": "Clinic",
        "license_number": "LIC1",
        "registration_date": stamp,
    })
    if approved:
        state.apply("vaccination.provider.approved.v1", {
            "provider_address": PROVIDER,
        })
    for n in range(1, records + 1):
        state.apply("vaccination.record.recorded.v1", {
            "record_id": n,
            "patient_address": PATIENT,
            "patient_name": "Alice",
            "vaccine_name": "VaxX",
            "manufacturer": "Mfr",
            "batch_number": "B001",
            "location": "NYC",
            "healthcare_provider": PROVIDER,
            "vaccination_date": stamp,
            "timestamp": stamp,
        })
    return state


# ══════════════════════════════════════════════════════════════
# REQUESTS
# ══════════════════════════════════════════════════════════════

class TestRequests:
    def test_record_request_to_command(self):
        command = _to_command(_record_request(), actor_id=PROVIDER)

        assert command.command_type == VACCINATION_RECORD_CREATE_REQUEST
        assert command.source_engine == "vaccination"
        assert command.actor_id == PROVIDER
        assert command.issued_at == NOW
        assert command.payload["batch_number"] == "B001"

    def test_requests_reject_wrong_types(self):
        with pytest.raises(InvalidInput, match="provider_name"):
            ProviderRegisterRequest(provider_name=None, license_number="LIC1")
        with pytest.raises(InvalidInput, match="vaccine_name"):
            _record_request(vaccine_name=7)

    def test_empty_strings_left_to_policies(self):
        request = ProviderRegisterRequest(provider_name="", license_number="")
        assert request.provider_name == ""

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            ProviderApproveRequest(provider_address=12)

    def test_record_id_must_be_int(self):
        with pytest.raises(InvalidInput, match="record_id"):
            RecordVerificationUpdateRequest(record_id="1", status=False)
        with pytest.raises(InvalidInput, match="record_id"):
            RecordVerificationUpdateRequest(record_id=True, status=False)

    def test_status_must_be_bool(self):
        with pytest.raises(InvalidInput, match="status"):
            RecordVerificationUpdateRequest(record_id=1, status=0)


# ══════════════════════════════════════════════════════════════
# INDIVIDUAL POLICIES
# ══════════════════════════════════════════════════════════════

class TestLedgerInitializationPolicy:
    def test_genesis_on_empty_state(self):
        state = LedgerState(ledger_id=LEDGER_ID)
        assert ledger_initialization_policy(
            _to_command(LedgerInitializeRequest()), state,
        ) is None

    def test_second_genesis_refused(self):
        reason = ledger_initialization_policy(
            _to_command(LedgerInitializeRequest()), _state(),
        )
        assert reason.code == LedgerStateError.code

    def test_commands_refused_before_genesis(self):
        state = LedgerState(ledger_id=LEDGER_ID)
        reason = ledger_initialization_policy(
            _to_command(ProviderRegisterRequest("Clinic", "LIC1"), PROVIDER), state,
        )
        assert reason.code == LedgerStateError.code


class TestAuthorityOnlyPolicy:
    def test_authority_passes(self):
        command = _to_command(ProviderApproveRequest(PROVIDER))
        assert authority_only_policy(command, _state()) is None

    def test_other_caller_unauthorized(self):
        command = _to_command(ProviderApproveRequest(PROVIDER), actor_id=PROVIDER)
        reason = authority_only_policy(command, _state())
        assert reason.code == ReasonCode.UNAUTHORIZED
        assert reason.policy_name == "authority_only_policy"

    def test_ignores_non_authority_commands(self):
        command = _to_command(ProviderRegisterRequest("Clinic", "LIC1"), PROVIDER)
        assert authority_only_policy(command, _state()) is None


class TestApprovedProviderPolicy:
    def test_unregistered_caller(self):
        command = _to_command(_record_request(), actor_id="0xEVE")
        reason = approved_provider_policy(command, _state(approved=True))
        assert reason.code == ReasonCode.UNAUTHORIZED

    def test_unapproved_provider(self):
        command = _to_command(_record_request(), actor_id=PROVIDER)
        reason = approved_provider_policy(command, _state(approved=False))
        assert reason.code == ReasonCode.UNAUTHORIZED

    def test_approved_provider(self):
        command = _to_command(_record_request(), actor_id=PROVIDER)
        assert approved_provider_policy(command, _state(approved=True)) is None

    def test_authority_is_not_a_provider(self):
        command = _to_command(_record_request(), actor_id=AUTHORITY)
        reason = approved_provider_policy(command, _state(approved=True))
        assert reason.code == ReasonCode.UNAUTHORIZED


class TestInputPolicies:
    @pytest.mark.parametrize("field", ["patient_name", "vaccine_name", "batch_number"])
    def test_required_record_fields(self, field):
        command = _to_command(_record_request(**{field: ""}), actor_id=PROVIDER)
        reason = required_fields_policy(command, _state(approved=True))
        assert reason.code == ReasonCode.INVALID_INPUT
        assert field in reason.message

    def test_manufacturer_and_location_may_be_empty(self):
        command = _to_command(
            _record_request(manufacturer="", location=""), actor_id=PROVIDER,
        )
        assert required_fields_policy(command, _state(approved=True)) is None

    @pytest.mark.parametrize("field", ["provider_name", "license_number"])
    def test_required_registration_fields(self, field):
        fields = {"provider_name": "Clinic", "license_number": "LIC1", field: ""}
        command = _to_command(ProviderRegisterRequest(**fields), actor_id="0xC4")
        reason = required_fields_policy(command, _state())
        assert reason.code == ReasonCode.INVALID_INPUT

    @pytest.mark.parametrize("patient", [
        None, "", "0x0000000000000000000000000000000000000000",
    ])
    def test_null_patient(self, patient):
        command = _to_command(
            _record_request(patient_address=patient), actor_id=PROVIDER,
        )
        reason = patient_address_policy(command, _state(approved=True))
        assert reason.code == ReasonCode.INVALID_INPUT


class TestExistencePolicies:
    def test_provider_already_registered(self):
        command = _to_command(ProviderRegisterRequest("Other", "LIC9"), PROVIDER)
        reason = provider_not_registered_policy(command, _state())
        assert reason.code == ReasonCode.ALREADY_REGISTERED

    def test_approve_unknown_provider(self):
        command = _to_command(ProviderApproveRequest("0xC4"))
        reason = provider_exists_policy(command, _state())
        assert reason.code == ReasonCode.NOT_FOUND

    @pytest.mark.parametrize("record_id", [0, 3, -1])
    def test_record_out_of_range(self, record_id):
        command = _to_command(RecordVerificationUpdateRequest(record_id, False))
        reason = record_exists_policy(command, _state(approved=True, records=2))
        assert reason.code == ReasonCode.NOT_FOUND

    def test_record_in_range(self):
        command = _to_command(RecordVerificationUpdateRequest(2, False))
        assert record_exists_policy(command, _state(approved=True, records=2)) is None


# ══════════════════════════════════════════════════════════════
# POLICY ORDER
# ══════════════════════════════════════════════════════════════

class TestPolicyOrder:
    @pytest.fixture
    def dispatcher(self):
        def _build(state):
            dispatcher = CommandDispatcher(context=state)
            for policy in VACCINATION_POLICIES:
                dispatcher.register_policy(policy)
            return dispatcher
        return _build

    def test_unauthorized_before_invalid_input(self, dispatcher):
        command = _to_command(
            _record_request(patient_address=None, patient_name=""),
            actor_id=PROVIDER,
        )
        outcome = dispatcher(_state(approved=False)).dispatch(command)
        assert outcome.reason.code == ReasonCode.UNAUTHORIZED

    def test_unauthorized_before_not_found(self, dispatcher):
        command = _to_command(ProviderApproveRequest("0xC4"), actor_id=PROVIDER)
        outcome = dispatcher(_state()).dispatch(command)
        assert outcome.reason.code == ReasonCode.UNAUTHORIZED

    def test_invalid_input_before_already_registered(self, dispatcher):
        command = _to_command(ProviderRegisterRequest("", "LIC1"), PROVIDER)
        outcome = dispatcher(_state()).dispatch(command)
        assert outcome.reason.code == ReasonCode.INVALID_INPUT

    def test_valid_record_accepted(self, dispatcher):
        command = _to_command(_record_request(), actor_id=PROVIDER)
        assert dispatcher(_state(approved=True)).dispatch(command).is_accepted
