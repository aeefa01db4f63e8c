"""
MedLedger

A FastAPI-based healthcare coordination ledger: patients keep references to
off-chain medical records and grant doctors read access, appointments move
their fee through escrow, and doctors attach telemedicine sessions and
prescriptions to confirmed appointments.
"""

__version__ = "1.0.0"
