# aquadash/errors.py
"""
Errors raised by the dashboard.

- ApiError            - the farm API refused a call or could not be reached
- FormValidationError - client-side checks failed before anything was sent
"""

from typing import Any, Optional


class ApiError(Exception):
    """Failed API call. `message` is what the operator gets to see."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class FormValidationError(Exception):
    """
    Form input rejected locally.

    `errors` is either a list of messages or a field -> message mapping,
    the template renders them next to the offending fields.
    """

    def __init__(self, errors: list[str] | dict[str, str]):
        self.errors = errors
        if isinstance(errors, dict):
            text = "; ".join(f"{k}: {v}" for k, v in errors.items())
        else:
            text = "; ".join(errors)
        super().__init__(text or "Invalid input")

    @property
    def messages(self) -> list[str]:
        if isinstance(self.errors, dict):
            return list(self.errors.values())
        return list(self.errors)
