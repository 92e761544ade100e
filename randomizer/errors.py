# randomizer/errors.py
# ---------------------------------
# Exceptions raised while turning a randomizer frame config into frames.

from typing import Optional


class ConfigurationError(ValueError):
    """
    The study configuration cannot be expanded (bad selector, empty
    parameterSets, weight/candidate length mismatch, ...).
    Fatal: the whole trial-generation step is aborted.
    """

    def __init__(self, message: str, parameter: Optional[str] = None, frame_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.frame_index = frame_index

    def __str__(self):
        details = []
        if self.parameter is not None:
            details.append('parameter=%r' % self.parameter)
        if self.frame_index is not None:
            details.append('frameList[%d]' % self.frame_index)
        if details:
            return '%s (%s)' % (self.message, ', '.join(details))
        return self.message


class CallbackError(RuntimeError):
    """The frame resolution callback failed for one template."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        super().__init__(message)
        self.frame_index = frame_index


class DataUnavailableWarning(UserWarning):
    """
    Recoverable: child data was missing or no age bracket matched, and a
    default was used instead.
    """
