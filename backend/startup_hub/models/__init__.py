from .startup import Startup, OperatingStatus, EmployeeRange
from .submission import Submission, SubmissionStatus
from .ownership_claim import OwnershipClaim

__all__ = [
    "Startup",
    "OperatingStatus",
    "EmployeeRange",
    "Submission",
    "SubmissionStatus",
    "OwnershipClaim",
]
