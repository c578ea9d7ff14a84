"""Exceptions raised by topocoords"""

__all__ = ['InvalidInputError', 'PropagationError']

from typing import Sequence


class InvalidInputError(ValueError):
    """Numeric input that the coordinate pipeline refuses to compute with"""


class PropagationError(RuntimeError):
    """
    A failure originating in an orbit propagator, kept separate from
    InvalidInputError so callers can tell the two apart.

    Args:
        message:
            Description of the failure

        attempts:
            (Optional) The provider attempts made before giving up, if the
            failure happened while loading a propagator
    """

    def __init__(self, message: str, attempts: Sequence = ()):
        super().__init__(message)
        self.attempts = list(attempts)
