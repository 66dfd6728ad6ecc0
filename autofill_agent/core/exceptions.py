"""Custom exceptions for the autofill agent."""

class AutofillError(Exception):
    """Base exception for autofill failures."""
    pass


class ActionExecutionError(AutofillError):
    """Custom exception for action execution failures."""
    pass


class ElementNotFoundError(AutofillError):
    """Custom exception for when a required control is gone from the page."""
    pass


class UploadError(ActionExecutionError):
    """Raised when a stored document cannot be attached to a file input."""
    pass


class ProfileLoadError(AutofillError):
    """Raised when a profile file cannot be read or parsed."""
    pass
