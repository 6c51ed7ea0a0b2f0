"""Error types raised by tallysheet.

Every error is caught at the request boundary and reported to the caller as
a failure response; none of them is retried.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""


class ParseError(LedgerError):
    """The request body is not a JSON object."""


class ValidationError(LedgerError):
    """A receipt field has a type that cannot be stored."""


class StorageError(LedgerError):
    """The backing store could not be read or written."""
