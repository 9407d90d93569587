"""Custom exception hierarchy for the docshare file layer."""


class DocShareError(Exception):
    """Base exception for all docshare errors."""


class AuthenticationRequiredError(DocShareError):
    """Raised when an operation is attempted without a resolvable identity."""


class RecordNotFoundError(DocShareError):
    """Raised when a file record, user, or blob does not exist."""


class AccessDeniedError(DocShareError):
    """Raised when the acting user is not allowed to perform an action."""


class StorageError(DocShareError):
    """Raised on document or blob store failures (DB connection, disk I/O, etc.)."""


class FileTooLargeError(DocShareError):
    """Raised when an upload exceeds the configured size limit."""


class MenuStateError(DocShareError):
    """Raised when an action menu handler is called in the wrong state."""
