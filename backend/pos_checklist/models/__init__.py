from pos_checklist.models.user import User
from pos_checklist.models.submission import Submission

__all__ = ["User", "Submission"]
