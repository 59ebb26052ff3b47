"""
Domain Exceptions for the Security Delivery scheduling engine.

Configuration gaps (missing day rates, unmatched group members, absent
allocations) are never raised: the services fall back and log instead.
The exceptions below cover:
- Internal invariants (swimlane claims, calendar advances)
- Malformed activity catalog entries
- Invalid reporting ranges handed in at the command-line boundary
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Invariant Exceptions
# =============================================================================

class InvariantViolationError(DomainError):
    """Raised when an internal invariant is violated."""

    def __init__(self, invariant_name: str, expected: str, actual: str):
        message = (
            f"Invariant '{invariant_name}' violated. "
            f"Expected: {expected}, Actual: {actual}"
        )
        super().__init__(message, code="INVARIANT_VIOLATION")
        self.invariant_name = invariant_name
        self.expected = expected
        self.actual = actual


class DuplicateSwimlaneActivityError(InvariantViolationError):
    """Raised when a swimlane resolves to an activity that is already claimed."""

    def __init__(self, activity_name: str, index: int):
        super().__init__(
            "unique_swimlane_claim",
            expected=f"activity #{index} claimed at most once",
            actual=f"'{activity_name}' matched by a second group member",
        )
        self.activity_name = activity_name
        self.index = index


# =============================================================================
# Activity Catalog Exceptions
# =============================================================================

class InvalidActivityTemplateError(DomainError):
    """Raised when an activity catalog entry cannot be turned into a template."""

    def __init__(self, activity_name: str, reason: str):
        message = f"Invalid activity template '{activity_name}': {reason}"
        super().__init__(message, code="INVALID_ACTIVITY_TEMPLATE")
        self.activity_name = activity_name
        self.reason = reason


# =============================================================================
# Reporting Range Exceptions
# =============================================================================

class InvalidDateRangeError(DomainError):
    """Raised when a reporting range ends before it starts."""

    def __init__(self, start_date, end_date):
        message = (
            f"Reporting end date ({end_date}) must not be before "
            f"start date ({start_date})"
        )
        super().__init__(message, code="INVALID_DATE_RANGE")
        self.start_date = start_date
        self.end_date = end_date


class UnknownCohortTypeError(DomainError):
    """Raised when a cross-charging cohort type is not recognised."""

    def __init__(self, group_type: str):
        message = (
            f"Unknown cohort type '{group_type}'. Expected one of: "
            f"workstream, whole_team, primary_role, individual, project"
        )
        super().__init__(message, code="UNKNOWN_COHORT_TYPE")
        self.group_type = group_type
