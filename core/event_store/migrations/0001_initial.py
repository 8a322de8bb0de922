import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LedgerEvent",
            fields=[
                (
                    "event_id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique event identifier. Enforces idempotency.",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        help_text="Registered event type, e.g. vaccination.record.recorded.v1.",
                        max_length=255,
                    ),
                ),
                (
                    "event_version",
                    models.PositiveSmallIntegerField(
                        help_text="Schema version of this event type's payload.",
                    ),
                ),
                (
                    "ledger_id",
                    models.UUIDField(
                        help_text="Chain scope. Each ledger has its own hash chain.",
                    ),
                ),
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        help_text="1-based position of this event in its ledger chain.",
                    ),
                ),
                (
                    "source_engine",
                    models.CharField(
                        help_text="Engine that emitted this event.",
                        max_length=100,
                    ),
                ),
                (
                    "actor_id",
                    models.CharField(
                        help_text="Authenticated caller identity that caused this event.",
                        max_length=255,
                    ),
                ),
                (
                    "correlation_id",
                    models.UUIDField(
                        help_text="Groups events belonging to the same story.",
                    ),
                ),
                (
                    "causation_id",
                    models.UUIDField(
                        blank=True,
                        help_text="Command that caused this event, if any.",
                        null=True,
                    ),
                ),
                (
                    "payload",
                    models.JSONField(
                        help_text="Versioned, JSON-native event payload.",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        help_text="Host clock reading of the operation that produced the event.",
                    ),
                ),
                (
                    "received_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="When the store persisted this event.",
                    ),
                ),
                (
                    "previous_event_hash",
                    models.CharField(
                        help_text="event_hash of the preceding event, or GENESIS.",
                        max_length=64,
                    ),
                ),
                (
                    "event_hash",
                    models.CharField(
                        help_text="SHA-256 of canonical payload + previous_event_hash.",
                        max_length=64,
                    ),
                ),
            ],
            options={
                "db_table": "vaxledger_event_store",
                "ordering": ["ledger_id", "sequence"],
                "indexes": [
                    models.Index(
                        fields=["ledger_id", "sequence"],
                        name="idx_levt_ledger_seq",
                    ),
                    models.Index(fields=["event_type"], name="idx_levt_type"),
                    models.Index(fields=["actor_id"], name="idx_levt_actor"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("ledger_id", "sequence"),
                        name="uq_levt_ledger_seq",
                    ),
                    models.UniqueConstraint(
                        fields=("ledger_id", "previous_event_hash"),
                        name="uq_levt_ledger_prev_hash",
                    ),
                ],
            },
        ),
    ]
