from .record import Record
from .permission import PermissionEdge
from .appointment import Appointment
from .session import TelemedicineSession
from .prescription import Prescription
from .account import Account
from .sequence import IdSequence
from .notification import Notification

__all__ = [
    "Record",
    "PermissionEdge",
    "Appointment",
    "TelemedicineSession",
    "Prescription",
    "Account",
    "IdSequence",
    "Notification",
]
