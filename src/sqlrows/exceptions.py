"""
Data-access exception classes.
"""
import sqlite3

import psycopg


class DataAccessError(Exception):
    """Base class for all sqlrows errors.
    """


class DriverError(DataAccessError):
    """Low-level driver failure (I/O, protocol, SQL) surfaced unchanged.

    The originating driver exception is always chained as ``__cause__``.
    """


class StaleRowError(DataAccessError):
    """A row view (or cursor-bound value) was used after the cursor advanced.
    """


class MalformedStatementSpec(DataAccessError, ValueError):
    """Structural input for a statement is empty, inconsistent or conflicting.
    """


class UnsafeIdentifierError(DataAccessError, ValueError):
    """A table, column or alias name contains a disallowed character.
    """

    def __init__(self, identifier: str, disallowed: str = ';') -> None:
        super().__init__(f'suspicious character found in entity: {identifier}')
        self.identifier = identifier
        self.disallowed = disallowed


DriverFailure = (
    psycopg.Error,
    sqlite3.Error,
    )
