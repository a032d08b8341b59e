"""Exception hierarchy for the calendar engine."""

import re
import time
from typing import Any


class CalendarEngineError(Exception):
    """Base exception for calendar engine operations."""

    pass


class CallerContractError(CalendarEngineError, ValueError):
    """A write operation was called without its required local parameters."""

    pass


class SettingsStorageError(CalendarEngineError):
    """Persisted configuration could not be read or written."""

    pass


# Store error catalog: code -> (user message, can retry, action required)
ERROR_CATALOG: dict[str, tuple[str, bool, str | None]] = {
    "USER_UNAUTHORIZED": (
        "You do not have permission to perform this action on the board.",
        False,
        "Ask the board owner to change your permissions",
    ),
    "UserUnauthorizedException": (
        "You do not have permission to perform this action on the board.",
        False,
        "Ask the board owner to change your permissions",
    ),
    "USER_ACCESS_DENIED": (
        "You do not have permission to perform this action on the board.",
        False,
        "Ask the board owner to change your permissions",
    ),
    "ResourceNotFoundException": (
        "One of the configured columns does not exist on the board.",
        False,
        "Open the settings and select the columns again",
    ),
    "InvalidColumnIdException": (
        "One of the configured columns does not exist on the board.",
        False,
        "Open the settings and select the columns again",
    ),
    "Column not found": (
        "One of the configured columns does not exist on the board.",
        False,
        "Open the settings and select the columns again",
    ),
    "ComplexityBudgetExhausted": (
        "The store is under heavy load right now.",
        True,
        "Wait a few seconds and try again",
    ),
    "COMPLEXITY_BUDGET_EXHAUSTED": (
        "The store is under heavy load right now.",
        True,
        "Wait a few seconds and try again",
    ),
    "ColumnValueException": (
        "The value does not match the column type on the board.",
        False,
        "Check the entered data",
    ),
    "CorrectedValueException": (
        "The entered value was corrected automatically by the store.",
        False,
        "Check the values on the board",
    ),
    "ParseError": (
        "The value does not match the column type on the board.",
        False,
        "Check the entered data",
    ),
    "InternalServerError": (
        "The store reported an internal server error.",
        True,
        "Try again in a few moments",
    ),
    "API_TEMPORARILY_BLOCKED": (
        "The store is temporarily unavailable.",
        True,
        "Try again in a few moments",
    ),
    "InvalidBoardIdException": (
        "The board was not found or you have no access to it.",
        False,
        "Check the board settings",
    ),
    "InvalidArgumentException": (
        "The request contained invalid data.",
        False,
        "Check the entered data",
    ),
    "Rate Limit Exceeded": (
        "The request rate limit was exceeded.",
        True,
        "Wait a few seconds and try again",
    ),
    "maxConcurrencyExceeded": (
        "The concurrent request limit was exceeded.",
        True,
        "Wait a few seconds and try again",
    ),
    "IP_RATE_LIMIT_EXCEEDED": (
        "The request rate limit was exceeded.",
        True,
        "Wait a few seconds and try again",
    ),
}

HTTP_STATUS_TO_ERROR_CODE: dict[int, str] = {
    400: "InvalidArgumentException",
    401: "USER_UNAUTHORIZED",
    403: "UserUnauthorizedException",
    404: "ResourceNotFoundException",
    409: "InvalidArgumentException",
    422: "InvalidArgumentException",
    423: "API_TEMPORARILY_BLOCKED",
    429: "Rate Limit Exceeded",
    500: "InternalServerError",
    502: "InternalServerError",
    503: "InternalServerError",
    504: "InternalServerError",
}

UNKNOWN_ERROR = "UNKNOWN_ERROR"


def classify_error_code(
    error_code: str | None,
    status_code: int | None = None,
    message: str | None = None,
) -> str:
    """Resolve the catalog code for a store failure.

    Explicit codes win, then HTTP status codes, then a code mentioned in
    the message text.
    """
    if error_code:
        return error_code
    if status_code is not None and status_code in HTTP_STATUS_TO_ERROR_CODE:
        return HTTP_STATUS_TO_ERROR_CODE[status_code]
    if message:
        lowered = message.lower()
        for code in ERROR_CATALOG:
            if code.lower() in lowered:
                return code
    return UNKNOWN_ERROR


def extract_operation_name(query: str | None) -> str | None:
    """Extract the operation name from store query text."""
    if not query:
        return None
    for pattern in (r"mutation\s+(\w+)", r"query\s+(\w+)", r"(\w+)\s*\("):
        match = re.search(pattern, query)
        if match:
            return match.group(1)
    return None


class StoreError(CalendarEngineError):
    """Remote store failure, wrapped with request and timing metadata.

    This is the only error form raised from the store boundary; transport
    exceptions and non-empty ``errors`` arrays both become a StoreError.
    """

    def __init__(
        self,
        message: str,
        *,
        request: Any = None,
        error_code: str | None = None,
        status_code: int | None = None,
        function_name: str | None = None,
        duration_ms: float | None = None,
        response: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.request = request
        self.status_code = status_code
        self.error_code = classify_error_code(error_code, status_code, message)
        self.function_name = function_name
        self.duration_ms = duration_ms
        self.response = response
        self.timestamp = time.time()

        user_message, can_retry, action = ERROR_CATALOG.get(
            self.error_code,
            (message or "An unexpected error occurred.", True, None),
        )
        self.user_message = user_message
        self.can_retry = can_retry
        self.action_required = action

    @property
    def operation_name(self) -> str | None:
        """Operation name of the failed request, if it can be determined."""
        query_text = getattr(self.request, "to_graphql", None)
        if callable(query_text):
            return extract_operation_name(query_text())
        if isinstance(self.request, str):
            return extract_operation_name(self.request)
        return None

    def to_dict(self) -> dict:
        """Full diagnostic object suitable for copying as JSON."""
        request_dump = None
        if self.request is not None:
            dump = getattr(self.request, "model_dump", None)
            request_dump = dump(mode="json") if callable(dump) else str(self.request)

        return {
            "error": {
                "errorCode": self.error_code,
                "errorMessage": self.message,
                "statusCode": self.status_code,
                "userMessage": self.user_message,
                "canRetry": self.can_retry,
                "actionRequired": self.action_required,
                "responseErrors": (self.response or {}).get("errors"),
            },
            "apiRequest": {
                "request": request_dump,
                "operationName": self.operation_name,
            },
            "request": {
                "functionName": self.function_name,
                "timestamp": self.timestamp,
                "duration": self.duration_ms,
            },
        }


class DeleteCommitError(CalendarEngineError):
    """One aggregated failure for an undoable-delete commit.

    All events of the commit were restored to caller-visible state.
    """

    def __init__(self, message: str, *, events: list, failures: list[StoreError]):
        super().__init__(message)
        self.events = events
        self.failures = failures
