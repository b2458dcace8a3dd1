from .ledger import CapacityLedger, Reservation, SqlCapacityLedger

__all__ = [
    "CapacityLedger",
    "Reservation",
    "SqlCapacityLedger",
]
