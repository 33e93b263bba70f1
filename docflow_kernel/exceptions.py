"""
Typed Exception Hierarchy for the Docflow Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The UI layer reacts differently to each workflow failure: a lost race means
"re-fetch and re-render", a missing rejection comment means "show the
comment box", an authorization failure means "hide the buttons".  Callers
must be able to tell these apart without parsing message strings.

Every exception therefore:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA (ids, statuses) as attributes

Example:
    try:
        workflow.decide(document_id, step_id, actor_id, decision, comment)
    except StepNotActionableError as e:
        refresh_document(e.document_id)
        api_response(code=e.code, reason=e.reason)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DocflowError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidConfigurationError
    |
    +-- NotFoundError
    |   +-- DocumentNotFoundError
    |   +-- DocumentTypeNotFoundError
    |
    +-- WorkflowError
    |   +-- DuplicateSequenceError
    |   +-- StepNotActionableError
    |   |   +-- DocumentAlreadyFinalizedError
    |   +-- CommentRequiredError
    |   +-- NotAuthorizedError
    |
    +-- ConcurrencyError
    |   +-- StoreConflictError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|--------------------------------------
Config       | INVALID_CONFIGURATION       | required approvals < 1, bad SLA, ...
-------------|-----------------------------|--------------------------------------
Not found    | DOCUMENT_NOT_FOUND          | Document id doesn't exist
             | DOCUMENT_TYPE_NOT_FOUND     | Document type id doesn't exist
-------------|-----------------------------|--------------------------------------
Workflow     | DUPLICATE_SEQUENCE          | Steps already exist for the document
             | DOCUMENT_ALREADY_FINALIZED  | Document already fully approved
             | STEP_NOT_ACTIONABLE         | Step is not the available step
             | COMMENT_REQUIRED            | Rejection without a comment
             | NOT_AUTHORIZED              | Actor may not decide this step
-------------|-----------------------------|--------------------------------------
Concurrency  | STORE_CONFLICT              | Conditional step update lost a race
-------------|-----------------------------|--------------------------------------
Immutability | IMMUTABILITY_VIOLATION      | Rewriting a decided step

===============================================================================
PROPAGATION
===============================================================================

All workflow errors are terminal for a single ``decide`` call.  The only
automatic retry is the single re-evaluation after a ``StoreConflictError``
inside the transition executor; if that retry still loses, the caller sees
``StepNotActionableError``.  ``StoreConflictError`` itself never leaves
``decide``.
"""


class DocflowError(Exception):
    """
    Base exception for all docflow kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DOCFLOW_ERROR"


# Configuration exceptions


class ConfigurationError(DocflowError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """A document type or configuration set is not usable."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, subject: str, reason: str):
        self.subject = subject
        self.reason = reason
        super().__init__(f"Invalid configuration for {subject}: {reason}")


# Lookup exceptions


class NotFoundError(DocflowError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class DocumentNotFoundError(NotFoundError):
    """Document does not exist."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class DocumentTypeNotFoundError(NotFoundError):
    """Document type does not exist."""

    code: str = "DOCUMENT_TYPE_NOT_FOUND"

    def __init__(self, document_type_id: str):
        self.document_type_id = document_type_id
        super().__init__(f"Document type not found: {document_type_id}")


# Workflow exceptions


class WorkflowError(DocflowError):
    """Base exception for approval workflow violations."""

    code: str = "WORKFLOW_ERROR"


class DuplicateSequenceError(WorkflowError):
    """Approval steps already exist for the document (double initialization)."""

    code: str = "DUPLICATE_SEQUENCE"

    def __init__(self, document_id: str, existing_steps: int):
        self.document_id = document_id
        self.existing_steps = existing_steps
        super().__init__(
            f"Document {document_id} already has {existing_steps} approval "
            "step(s); workflow initialized twice"
        )


class StepNotActionableError(WorkflowError):
    """
    The target step is not the currently available step.

    Covers: wrong sequence position, step already decided, step blocked by
    an earlier rejection, step not belonging to the document, and the loser
    of a concurrent decide race.
    """

    code: str = "STEP_NOT_ACTIONABLE"

    def __init__(self, document_id: str, step_id: str, reason: str):
        self.document_id = document_id
        self.step_id = step_id
        self.reason = reason
        super().__init__(
            f"Step {step_id} of document {document_id} is not actionable: {reason}"
        )


class DocumentAlreadyFinalizedError(StepNotActionableError):
    """
    The document is already fully approved.

    A specialisation of StepNotActionableError: no step of a finalized
    document is actionable.
    """

    code: str = "DOCUMENT_ALREADY_FINALIZED"

    def __init__(self, document_id: str, status: str, step_id: str | None = None):
        self.status = status
        WorkflowError.__init__(
            self, f"Document {document_id} is already finalized (status={status})"
        )
        self.document_id = document_id
        self.step_id = step_id
        self.reason = "document_finalized"


class CommentRequiredError(WorkflowError):
    """A rejection was submitted without a comment."""

    code: str = "COMMENT_REQUIRED"

    def __init__(self, step_id: str, decision: str):
        self.step_id = step_id
        self.decision = decision
        super().__init__(
            f"A non-empty comment is required to {decision} step {step_id}"
        )


class NotAuthorizedError(WorkflowError):
    """The acting user may not decide this step."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, actor_id: str, step_id: str, reason: str = ""):
        self.actor_id = actor_id
        self.step_id = step_id
        self.reason = reason
        message = f"Actor {actor_id} is not authorized to decide step {step_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


# Concurrency exceptions


class ConcurrencyError(DocflowError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class StoreConflictError(ConcurrencyError):
    """The conditional step update matched no row (lost a race)."""

    code: str = "STORE_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected_status: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_status = expected_status
        super().__init__(
            f"Conditional update on {entity_type} {entity_id} failed: "
            f"row no longer in status '{expected_status}'"
        )


# Immutability exceptions


class ImmutabilityError(DocflowError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify a record that is immutable.

    Decided approval steps are one-way: pending -> approved|rejected, never
    reopened or rewritten.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
