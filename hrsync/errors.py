class DatabaseOperationError(Exception):
    """Raised when a statement against the database cannot be completed.

    Covers connectivity loss, statement failures (bad SQL, type mismatch,
    constraint violation) and unexpected result shapes. The underlying
    driver exception is available as ``__cause__``.
    """
    pass
