"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each class carries the HTTP-style status code an outer binding should use.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code = 400


class ValidationError(DomainException):
    """Input is malformed or an invariant would be violated."""

    status_code = 400


class EntityNotFoundError(DomainException):
    """A requested entity does not exist within the organization."""

    status_code = 404


class BusinessRuleError(DomainException):
    """The request is well-formed but not allowed in the current state."""

    status_code = 422


class DatabaseError(DomainException):
    """The underlying storage failed; the message never carries driver text."""

    status_code = 500
