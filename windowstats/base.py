"""Base class for fixed-capacity window structures."""

from abc import ABC, abstractmethod
from typing import Any, Optional
import logging
import numbers

from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


def validate_length(length: Any, name: str = "length", window_name: Optional[str] = None) -> int:
    """
    Validate a window length or lookback parameter.

    Args:
        length (Any): The value to validate.
        name (str): Parameter name for error messages.
        window_name (Optional[str]): Owning structure, used as message prefix.

    Returns:
        int: The validated length.

    Raises:
        InvalidParameterError: If length is not a positive integer.
    """
    if not isinstance(length, numbers.Integral) or isinstance(length, bool):
        raise InvalidParameterError(name, length, "positive integer", window_name)

    if length <= 0:
        raise InvalidParameterError(name, length, "positive integer (> 0)", window_name)

    return int(length)


class BaseWindow(ABC):
    """Abstract base for streaming structures bounded to the last ``length`` observations."""

    def __init__(self, length: int):
        """Initialize window with its fixed capacity."""
        self._name = self.__class__.__name__
        self.length = self._validate_length(length, self._name)
        self._count = 0

        logger.debug(f"Initialized {self._name} with length={length}")

    @abstractmethod
    def add(self, value: float) -> None:
        """
        Append one observation, evicting the oldest once capacity is reached.

        Observations must arrive in time order. Implementations must not
        validate or log here; this is the per-step hot path.

        Args:
            value (float): The newest observation.
        """
        pass

    @property
    def count(self) -> int:
        """Number of observations currently inside the window."""
        return min(self._count, self.length)

    @property
    def is_ready(self) -> bool:
        """
        Check if the window holds a full ``length`` observations.

        Returns:
            bool: True once ``length`` observations have been added.
        """
        return self._count >= self.length

    def reset(self) -> None:
        """
        Reset the window to its post-construction state.

        Subclasses clear their own structures and then call this.
        """
        self._count = 0
        logger.debug(f"Reset {self._name} window state")

    @staticmethod
    def _validate_length(length: int, window_name: Optional[str] = None) -> int:
        """Validate the capacity passed to the constructor."""
        return validate_length(length, "length", window_name)

    def __repr__(self) -> str:
        """String representation of the window."""
        ready_status = "ready" if self.is_ready else f"warming up ({self._count}/{self.length})"
        return f"{self._name}(length={self.length}, {ready_status})"

    def __str__(self) -> str:
        """Human-readable string representation."""
        return self.__repr__()
