import json
import pytest

from medledger.core.errors import AccessDenied
from medledger.models import Notification
from medledger.services.record_service import RecordService

from .conftest import PATIENT, DOCTOR, OTHER_DOCTOR

class TestRecordStore:

    def test_add_record_appends_in_order(self, db):
        """Records come back in insertion order with the caller as owner."""
        service = RecordService(db)
        service.add_record(PATIENT, "hash-a")
        service.add_record(PATIENT, "hash-b")

        records = service.get_records(PATIENT, PATIENT)
        assert [r.content_hash for r in records] == ["hash-a", "hash-b"]
        assert all(r.owner == PATIENT for r in records)
        assert [r.id for r in records] == [0, 1]

    def test_records_are_per_owner(self, db):
        service = RecordService(db)
        service.add_record(PATIENT, "hash-a")
        service.add_record(DOCTOR, "hash-d")

        assert [r.content_hash for r in service.get_records(DOCTOR, DOCTOR)] == ["hash-d"]

    def test_add_record_emits_notification(self, db, published):
        RecordService(db).add_record(PATIENT, "hash-a")

        event = db.query(Notification).one()
        assert event.event == "RecordAdded"
        assert event.payload == {"patient": PATIENT, "content_hash": "hash-a"}

        channel, message = published[-1]
        assert json.loads(message)["event"] == "RecordAdded"

class TestPermissionRegistry:

    def test_self_access_always_allowed(self, db):
        service = RecordService(db)
        assert service.get_records(PATIENT, PATIENT) == []

    def test_doctor_without_grant_is_denied(self, db):
        service = RecordService(db)
        service.add_record(PATIENT, "hash-a")

        with pytest.raises(AccessDenied):
            service.get_records(DOCTOR, PATIENT)

    def test_grant_then_read(self, db):
        service = RecordService(db)
        service.add_record(PATIENT, "hash-a")
        service.grant_access(PATIENT, DOCTOR)

        records = service.get_records(DOCTOR, PATIENT)
        assert [r.content_hash for r in records] == ["hash-a"]

    def test_grant_is_per_doctor(self, db):
        service = RecordService(db)
        service.grant_access(PATIENT, DOCTOR)

        with pytest.raises(AccessDenied):
            service.get_records(OTHER_DOCTOR, PATIENT)

    def test_revoke_removes_access(self, db):
        service = RecordService(db)
        service.grant_access(PATIENT, DOCTOR)
        service.revoke_access(PATIENT, DOCTOR)

        with pytest.raises(AccessDenied):
            service.get_records(DOCTOR, PATIENT)

    def test_most_recent_toggle_wins(self, db):
        """Grant and revoke are idempotent; only the last call matters."""
        service = RecordService(db)
        service.grant_access(PATIENT, DOCTOR)
        service.grant_access(PATIENT, DOCTOR)
        service.revoke_access(PATIENT, DOCTOR)
        service.revoke_access(PATIENT, DOCTOR)
        assert service.has_access(PATIENT, DOCTOR) is False

        service.grant_access(PATIENT, DOCTOR)
        assert service.has_access(PATIENT, DOCTOR) is True

    def test_grant_is_directional(self, db):
        """A patient granting a doctor does not open the doctor's records."""
        service = RecordService(db)
        service.grant_access(PATIENT, DOCTOR)

        with pytest.raises(AccessDenied):
            service.get_records(PATIENT, DOCTOR)

    def test_list_grantees(self, db):
        service = RecordService(db)
        service.grant_access(PATIENT, OTHER_DOCTOR)
        service.grant_access(PATIENT, DOCTOR)
        service.revoke_access(PATIENT, OTHER_DOCTOR)

        assert service.list_grantees(PATIENT) == [DOCTOR]

    def test_permission_notifications(self, db):
        service = RecordService(db)
        service.grant_access(PATIENT, DOCTOR)
        service.revoke_access(PATIENT, DOCTOR)

        events = db.query(Notification).order_by(Notification.id).all()
        assert [e.event for e in events] == ["PermissionGranted", "PermissionRevoked"]
        assert events[0].payload == {"patient": PATIENT, "doctor": DOCTOR}
