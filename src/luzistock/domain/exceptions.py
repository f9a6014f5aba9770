"""Domain-level exceptions.

Business rule violations are subclasses of DomainException so the CLI
layer can catch them uniformly and display user-friendly messages.

Shortfalls and inactive products are *not* exceptions; they travel as
data (see ``StockValidationResult``).  Only infrastructure faults and
rule violations on direct commands are raised.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PersistenceError(Exception):
    """The data store could not be read or written.

    Deliberately not a DomainException: callers cannot reason about it
    item by item and should answer with a generic "try again".
    """
