"""
Exception types raised by observablestate.

Each error also subclasses the built-in category it belongs to, so callers
that already catch ``TypeError``/``LookupError`` keep working.
"""


class ObservableStateError(Exception):
    """Base class for all observablestate errors."""


class CloneError(ObservableStateError, TypeError):
    """A value could not be deep-cloned into plain state data.

    Raised for callables, cyclic graphs, live resource handles and any other
    object that is not plain data. Always raised before state is touched.
    """


class PatchPathError(ObservableStateError, LookupError):
    """A mutation record's path does not resolve against the target tree."""

    def __init__(self, path, message: str):
        self.path = tuple(path)
        dotted = '.'.join(str(segment) for segment in self.path) or '<root>'
        super().__init__(f"{message} (path: {dotted})")
