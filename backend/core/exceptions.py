"""Domain exceptions raised by the service layer and mapped to HTTP responses in api.main"""
from typing import Any, Dict, Optional


class TrueFitError(Exception):
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidIdError(TrueFitError):
    status_code = 400


class NotFoundError(TrueFitError):
    status_code = 404


class ConflictError(TrueFitError):
    status_code = 409


class WorkflowError(TrueFitError):
    """A multi-step update failed part way; the context names the failed step."""
    status_code = 500
