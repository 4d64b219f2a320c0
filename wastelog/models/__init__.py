"""Application models package."""

from wastelog.models.audit_log import AuditLog
from wastelog.models.branch import Branch
from wastelog.models.review_request import ReviewRequest
from wastelog.models.user import User
from wastelog.models.waste_record import WasteRecord

__all__ = ["AuditLog", "Branch", "ReviewRequest", "User", "WasteRecord"]
