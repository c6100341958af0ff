"""
Typed Exception Hierarchy for the Rewards Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (forms, dashboards, batch jobs) must react to errors by category:
a missing collection is an administrator problem, a duplicate submission is
a user problem, a closed contestation is a stale screen.  Parsing message
strings for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        ledger.resolve(contestation_id, manager_id, response)
    except ContestationAlreadyClosedError as e:
        notify(f"Contestation already {e.status}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RewardsKernelError (base)
    |
    +-- ConfigurationError
    |   +-- CatalogNotConfiguredError
    |   +-- InvalidConfigurationError
    |
    +-- AuthorizationError
    |   +-- SectorAccessDeniedError
    |
    +-- ValidationError
    |   +-- ContestationValidationError
    |   +-- GoalValidationError
    |   +-- SubmissionValidationError
    |
    +-- NotFoundError
    |   +-- GoalNotFoundError
    |   +-- SubmissionNotFoundError
    |   +-- ContestationNotFoundError
    |
    +-- ContestationError
    |   +-- ContestationAlreadyClosedError
    |   +-- InvalidContestationTransitionError
    |
    +-- SubmissionError
        +-- DuplicateSubmissionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Configuration   | CATALOG_NOT_CONFIGURED        | Backing table/column missing
                | INVALID_CONFIGURATION         | Settings file has bad values
----------------|-------------------------------|---------------------------------------
Authorization   | SECTOR_ACCESS_DENIED          | Caller outside the requested scope
----------------|-------------------------------|---------------------------------------
Validation      | CONTESTATION_VALIDATION_ERROR | Missing/blank reason
                | GOAL_VALIDATION_ERROR         | Goal definition breaks invariants
                | SUBMISSION_VALIDATION_ERROR   | Malformed submission payload
----------------|-------------------------------|---------------------------------------
Not found       | GOAL_NOT_FOUND                | Goal id doesn't exist
                | SUBMISSION_NOT_FOUND          | Submission id doesn't exist
                | CONTESTATION_NOT_FOUND        | Contestation id doesn't exist
----------------|-------------------------------|---------------------------------------
Contestation    | CONTESTATION_ALREADY_CLOSED   | Transition out of RESOLVED/DISMISSED
                | INVALID_CONTESTATION_TRANSITION | Target state not reachable
----------------|-------------------------------|---------------------------------------
Submission      | DUPLICATE_SUBMISSION          | Second submission for the same day

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Configuration errors are surfaced with a user-facing message directing
   the user to an administrator.  They are never retried.

2. Money parsing never raises: ``currency.parse`` degrades to ``0``.  The
   ValidationError branch is for contestation and goal payloads, which the
   caller must reject and re-prompt.

3. NotFoundError subclasses propagate to the caller unchanged.
"""


class RewardsKernelError(Exception):
    """
    Base exception for all rewards kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "REWARDS_KERNEL_ERROR"


# Configuration


class ConfigurationError(RewardsKernelError):
    """Backing store or settings are not set up as expected."""

    code: str = "CONFIGURATION_ERROR"

    user_message: str = (
        "O sistema não está configurado corretamente. "
        "Entre em contato com o administrador."
    )


class CatalogNotConfiguredError(ConfigurationError):
    """The goal/submission collection lacks the expected schema."""

    code: str = "CATALOG_NOT_CONFIGURED"

    def __init__(self, collection: str, detail: str = ""):
        self.collection = collection
        self.detail = detail
        super().__init__(
            f"Collection '{collection}' is not configured"
            + (f": {detail}" if detail else "")
        )


class InvalidConfigurationError(ConfigurationError):
    """A settings value is missing or out of range."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for '{key}': {reason}")


# Authorization


class AuthorizationError(RewardsKernelError):
    """Caller lacks permission for the requested scope."""

    code: str = "AUTHORIZATION_ERROR"


class SectorAccessDeniedError(AuthorizationError):
    """Caller may not read or write data of the given sector/collaborator."""

    code: str = "SECTOR_ACCESS_DENIED"

    def __init__(self, role: str, resource: str, reason: str = ""):
        self.role = role
        self.resource = resource
        self.reason = reason
        super().__init__(
            f"Role '{role}' may not access {resource}"
            + (f" ({reason})" if reason else "")
        )


# Validation


class ValidationError(RewardsKernelError):
    """Malformed payload that the caller must correct and resubmit."""

    code: str = "VALIDATION_ERROR"


class ContestationValidationError(ValidationError):
    """Contestation create payload is invalid."""

    code: str = "CONTESTATION_VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid contestation {field}: {reason}")


class GoalValidationError(ValidationError):
    """Goal definition violates a catalog invariant."""

    code: str = "GOAL_VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid goal {field}: {reason}")


class SubmissionValidationError(ValidationError):
    """Submission payload is invalid."""

    code: str = "SUBMISSION_VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid submission {field}: {reason}")


# Not found


class NotFoundError(RewardsKernelError):
    """Referenced record does not exist."""

    code: str = "NOT_FOUND"


class GoalNotFoundError(NotFoundError):
    """Goal with given ID was not found."""

    code: str = "GOAL_NOT_FOUND"

    def __init__(self, goal_id: str):
        self.goal_id = str(goal_id)
        super().__init__(f"Goal not found: {goal_id}")


class SubmissionNotFoundError(NotFoundError):
    """Submission with given ID was not found."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: str):
        self.submission_id = str(submission_id)
        super().__init__(f"Submission not found: {submission_id}")


class ContestationNotFoundError(NotFoundError):
    """Contestation with given ID was not found."""

    code: str = "CONTESTATION_NOT_FOUND"

    def __init__(self, contestation_id: str):
        self.contestation_id = str(contestation_id)
        super().__init__(f"Contestation not found: {contestation_id}")


# Contestation lifecycle


class ContestationError(RewardsKernelError):
    """Base exception for contestation lifecycle errors."""

    code: str = "CONTESTATION_ERROR"


class ContestationAlreadyClosedError(ContestationError):
    """Contestation is RESOLVED or DISMISSED and cannot transition again."""

    code: str = "CONTESTATION_ALREADY_CLOSED"

    def __init__(self, contestation_id: str, status: str):
        self.contestation_id = str(contestation_id)
        self.status = status
        super().__init__(
            f"Contestation {contestation_id} is already {status}"
        )


class InvalidContestationTransitionError(ContestationError):
    """Requested target status is not reachable from the current one."""

    code: str = "INVALID_CONTESTATION_TRANSITION"

    def __init__(self, contestation_id: str, from_status: str, to_status: str):
        self.contestation_id = str(contestation_id)
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Contestation {contestation_id} cannot move "
            f"from {from_status} to {to_status}"
        )


# Submission intake


class SubmissionError(RewardsKernelError):
    """Base exception for submission intake errors."""

    code: str = "SUBMISSION_ERROR"


class DuplicateSubmissionError(SubmissionError):
    """Collaborator already submitted a checklist for that day."""

    code: str = "DUPLICATE_SUBMISSION"

    def __init__(self, collaborator_id: str, submission_date: str):
        self.collaborator_id = str(collaborator_id)
        self.submission_date = str(submission_date)
        super().__init__(
            f"Collaborator {collaborator_id} already submitted on {submission_date}"
        )
