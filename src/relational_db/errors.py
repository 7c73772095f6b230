"""Errors raised by the query engine. Each one maps to a single client-facing message."""

from typing import Optional


class DBError(Exception):
    """Root of every error reported back to the client."""

    default_message = "Database error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


# not-found
class DatabaseNotFoundError(DBError):
    default_message = "Database does not exist"


class TableNotFoundError(DBError):
    default_message = "Table does not exist"


class AttributeNotFoundError(DBError):
    default_message = "Attribute does not exist"


class RecordNotFoundError(DBError):
    default_message = "No record with that id"


# duplicate
class DuplicateDatabaseError(DBError):
    default_message = "Database already exists"


class DuplicateTableError(DBError):
    default_message = "Table already exists"


class DuplicateAttributeError(DBError):
    default_message = "Attribute names must be unique"


# malformed input
class InvalidQueryError(DBError):
    default_message = "Invalid query"


class PrimaryKeyAlterationError(InvalidQueryError):
    default_message = "The id attribute cannot be altered"


class InvalidListError(DBError):
    default_message = "Invalid list"


class InvalidValueError(DBError):
    default_message = "Number of values does not match number of attributes"


class NoDatabaseInUseError(DBError):
    default_message = "No database in use"


class StorageError(DBError):
    default_message = "Storage operation failed"
