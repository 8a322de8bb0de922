"""
VaxLedger Event Store — Ledger Event Model
============================================
Durable home of the hash-chained ledger events.

RULES:
- Insert only: no updates, no deletes
- One chain per ledger_id, ordered by sequence (1, 2, 3, ...)
- previous_event_hash → event_hash links every event to its predecessor
- Payload is JSON-native so stored digests verify after reload

This file contains NO ledger logic.
"""

import uuid

from django.db import models


class LedgerEvent(models.Model):
    """
    One immutable ledger event.

    Field groups:
        Identity & Classification
        Ledger Scope
        Actor & Causality
        Payload
        Temporal
        Integrity (Hash-Chain)
    """

    # ── Identity & Classification ─────────────────────────────
    event_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique event identifier. Enforces idempotency.",
    )

    event_type = models.CharField(
        max_length=255,
        help_text="Registered event type, e.g. vaccination.record.recorded.v1.",
    )

    event_version = models.PositiveSmallIntegerField(
        help_text="Schema version of this event type's payload.",
    )

    # ── Ledger Scope ──────────────────────────────────────────
    ledger_id = models.UUIDField(
        help_text="Chain scope. Each ledger has its own hash chain.",
    )

    sequence = models.PositiveBigIntegerField(
        help_text="1-based position of this event in its ledger chain.",
    )

    source_engine = models.CharField(
        max_length=100,
        help_text="Engine that emitted this event.",
    )

    # ── Actor & Causality ─────────────────────────────────────
    actor_id = models.CharField(
        max_length=255,
        help_text="Authenticated caller identity that caused this event.",
    )

    correlation_id = models.UUIDField(
        help_text="Groups events belonging to the same story.",
    )

    causation_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Command that caused this event, if any.",
    )

    # ── Payload ───────────────────────────────────────────────
    payload = models.JSONField(
        help_text="Versioned, JSON-native event payload.",
    )

    # ── Temporal ──────────────────────────────────────────────
    created_at = models.DateTimeField(
        help_text="Host clock reading of the operation that produced the event.",
    )

    received_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the store persisted this event.",
    )

    # ── Integrity (Hash-Chain) ────────────────────────────────
    previous_event_hash = models.CharField(
        max_length=64,
        help_text="event_hash of the preceding event, or GENESIS.",
    )

    event_hash = models.CharField(
        max_length=64,
        help_text="SHA-256 of canonical payload + previous_event_hash.",
    )

    class Meta:
        db_table = "vaxledger_event_store"
        ordering = ["ledger_id", "sequence"]
        indexes = [
            models.Index(
                fields=["ledger_id", "sequence"],
                name="idx_levt_ledger_seq",
            ),
            models.Index(
                fields=["event_type"],
                name="idx_levt_type",
            ),
            models.Index(
                fields=["actor_id"],
                name="idx_levt_actor",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=("ledger_id", "sequence"),
                name="uq_levt_ledger_seq",
            ),
            models.UniqueConstraint(
                fields=("ledger_id", "previous_event_hash"),
                name="uq_levt_ledger_prev_hash",
            ),
        ]

    # ══════════════════════════════════════════════════════════
    # IMMUTABILITY GUARDS
    # ══════════════════════════════════════════════════════════

    def save(self, *args, **kwargs):
        """INSERT only. A persisted ledger event is never rewritten."""
        if not self._state.adding:
            raise PermissionError(
                "Ledger events are immutable. Cannot update a persisted event."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Ledger events are never deleted.")

    def __str__(self):
        return f"[{self.event_type}] #{self.sequence} {self.event_id}"
