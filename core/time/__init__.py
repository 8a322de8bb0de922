"""
VaxLedger Core Time — Public API
==================================
Injectable clock. The ledger takes one reading per mutating call.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
]
