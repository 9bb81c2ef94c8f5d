"""Exceptions raised by the simulator."""


class ScanSimError(Exception):
    """Base class for all simulator errors."""


class SceneFormatError(ScanSimError):
    """
    The scene source could not be read or does not describe a valid scene.
    A simulator cannot be constructed from such a source.
    """

    def __init__(self, message, source=None):
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)
        self.source = source


class InvalidControlError(ScanSimError, ValueError):
    """A control command contained NaN or infinite values. The simulator state is left unchanged."""
