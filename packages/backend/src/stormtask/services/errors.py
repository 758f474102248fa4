"""Typed failures raised by the service layer.

Learn: "Not found" is deliberately absent — a lookup miss is a normal
outcome and services return None (or an empty list) for it. Exceptions
are kept for things the caller must react to differently:

- ConflictError         → a unique constraint would be violated (409)
- InvalidReferenceError → a foreign key points at nothing (404)
- StorageError          → the database itself failed (500)
"""


class ConflictError(Exception):
    """Raised when a write collides with a unique constraint."""
    pass


class InvalidReferenceError(Exception):
    """Raised when a write references a row that does not exist."""
    pass


class StorageError(Exception):
    """Raised when the database fails for reasons unrelated to the data."""
    pass
