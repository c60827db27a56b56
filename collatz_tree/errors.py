# --- Errors ------------------------------------------------------------------
# Everything raised on purpose derives from CollatzTreeError.


class CollatzTreeError(Exception):
    """Base class for every error raised by this package."""


class StructuralInvariantViolation(CollatzTreeError, RuntimeError):
    """A node was asked to take a third child.

    The recurrence gives every value at most two predecessors, so this only
    happens when trajectory arithmetic or tree bookkeeping is broken.
    """


class ConfigurationError(CollatzTreeError, ValueError):
    """An AngularConfig field holds an invalid value."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class TreeFormatError(CollatzTreeError, ValueError):
    """A serialized tree could not be decoded."""


class RenderError(CollatzTreeError):
    """The layout cannot be turned into an image."""
