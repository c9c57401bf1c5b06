"""
Domain Errors for Finance Manager

Every failure the ledger can detect is raised as one of these.
The front end catches FinanceError, shows the message and keeps going.

DESIGN DECISION: These do NOT subclass ValueError.
Pydantic wraps ValueError raised inside validators into a ValidationError;
anything else propagates unchanged, so model constructors surface the
same error types as the services do.
"""


class FinanceError(Exception):
    """Base exception for all ledger errors."""
    pass


class InvalidArgumentError(FinanceError):
    """Malformed or out-of-range input (blank category, non-positive amount...)."""
    pass


class AlreadyExistsError(FinanceError):
    """Duplicate login or duplicate budget for a category."""
    pass


class NotFoundError(FinanceError):
    """Unknown user, missing budget or unknown category."""
    pass


class InvalidCredentialError(FinanceError):
    """Password does not match."""
    pass


class InvalidStateError(FinanceError):
    """Operation not allowed in the current state (e.g. not logged in)."""
    pass


class InsufficientFundsError(FinanceError):
    """Transfer exceeds the sender's balance."""
    pass
