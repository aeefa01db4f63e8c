"""
Test suite for MedLedger.

Contains service-level tests for the ledger state machine and API tests.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
