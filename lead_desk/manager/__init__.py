"""In-memory lead snapshot management on top of the remote store."""

from .service import DuplicateLeadError, LeadManager, MissingPhoneError

__all__ = ["DuplicateLeadError", "LeadManager", "MissingPhoneError"]
