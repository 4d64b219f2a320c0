"""Schema exports."""

from wastelog.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from wastelog.schemas.branch import BranchCreate, BranchRead
from wastelog.schemas.review import (
    MutationResponse,
    ReviewDecisionRequest,
    ReviewDecisionResponse,
    ReviewRequestDetail,
    ReviewRequestFilter,
    ReviewRequestRead,
)
from wastelog.schemas.waste import (
    AuditEntryRead,
    WasteDeleteRequest,
    WasteMutationRequest,
    WasteRecordChanges,
    WasteRecordFilter,
    WasteRecordPayload,
    WasteRecordRead,
)

__all__ = [
    "AuthUserResponse",
    "LoginRequest",
    "TokenResponse",
    "BranchCreate",
    "BranchRead",
    "MutationResponse",
    "ReviewDecisionRequest",
    "ReviewDecisionResponse",
    "ReviewRequestDetail",
    "ReviewRequestFilter",
    "ReviewRequestRead",
    "AuditEntryRead",
    "WasteDeleteRequest",
    "WasteMutationRequest",
    "WasteRecordChanges",
    "WasteRecordFilter",
    "WasteRecordPayload",
    "WasteRecordRead",
]
