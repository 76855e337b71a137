class PortalError(Exception):
    """Base class for every error a handler is expected to catch and show."""


class ValidationError(PortalError):
    """Malformed or missing input."""


class ConflictError(PortalError):
    """Duplicate unique key (email, employee id) or a forbidden self-action."""


class ReferentialError(PortalError):
    """A referenced account or department is missing, or a department is in use."""


class AuthFailure(PortalError):
    """Bad credentials or unverified account. The message never says which."""


class AccessDenial(PortalError):
    """No session, or the session role may not perform the operation."""


class StorageCorruption(PortalError):
    """The stored document could not be decoded into a Store."""
