"""Domain error taxonomy."""


class LedgerError(Exception):
    """Base class for errors raised by the nutrition ledger."""


class ValidationError(LedgerError):
    """A request field is missing or out of range."""


class NotFoundError(LedgerError):
    """A ledger, entry, ingredient, recipe or plan does not exist."""


class UpstreamFailure(LedgerError):
    """Persistence failed; the triggering request cannot complete."""


class NotificationFailure(LedgerError):
    """A notification could not be delivered."""


class NoSuitableIngredientsError(ValidationError):
    """The candidate pool for a meal slot is empty."""
