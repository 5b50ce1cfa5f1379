from typing import Optional


class SubmissionValidationError(Exception):
    def __init__(self, field: str, message: str, index: Optional[int] = None):
        self.field = field
        self.message = message
        self.index = index
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"detail": self.message, "field": self.field}
        if self.index is not None:
            body["index"] = self.index
        return body
