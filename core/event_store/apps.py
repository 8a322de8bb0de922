"""
VaxLedger Core — Event Store App Configuration
================================================
Registers the ledger event table with Django.

This app persists hash-chained ledger events. It does not interpret
them; the vaccination engine replays them into state.
"""

from django.apps import AppConfig


class EventStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.event_store"
    label = "event_store"
    verbose_name = "VaxLedger Event Store"
