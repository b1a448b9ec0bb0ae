"""Factory for creating window structures."""

import inspect
from typing import Any, Dict, List, Optional, Type

from .cumulative import CumulativeWindowAggregator, PairedWindowAggregator
from .exceptions import InvalidParameterError, WindowNotFoundError
from .minmax import SlidingExtremumTracker
from .order_statistics import OrderStatisticWindow


class WindowRegistry:
    """Registry for managing window structures with aliases."""

    def __init__(self):
        """Initialize registry with built-in structures."""
        self._registry: Dict[str, Type] = {}
        self._canonical: Dict[Type, str] = {}
        self._register_builtin_windows()

    def _register_builtin_windows(self) -> None:
        """Register built-in structures."""
        # Unbounded prefix-sum logs
        self.register('cumulative', CumulativeWindowAggregator, aliases=['rolling_sum', 'sum', 'average'])
        self.register('paired', PairedWindowAggregator, aliases=['rolling_correlation', 'correlation', 'r_squared'])

        # Fixed-capacity windows
        self.register('extremum', SlidingExtremumTracker, aliases=['rolling_min_max', 'min_max', 'max', 'min'])
        self.register('order_statistic', OrderStatisticWindow, aliases=['rolling_order_statistic', 'rank', 'median'])

    def register(self, name: str, window_class: Type, aliases: Optional[List[str]] = None) -> None:
        """Register a structure with aliases."""
        self._registry[name.lower()] = window_class
        self._canonical[window_class] = name.lower()

        if aliases:
            for alias in aliases:
                self._registry[alias.lower()] = window_class

    def get(self, name: str) -> Type:
        """Get structure class by name."""
        name_lower = name.lower()
        if name_lower not in self._registry:
            raise WindowNotFoundError(name, self.list_windows())

        return self._registry[name_lower]

    def list_windows(self) -> List[str]:
        """List canonical structure names."""
        return sorted(self._canonical.values())

    def get_aliases(self, name: str) -> List[str]:
        """
        Get all names registered for a structure.

        Args:
            name (str): Structure name or alias

        Returns:
            List[str]: Every name (including aliases) for the structure
        """
        try:
            target_class = self.get(name)
            return [key for key, cls in self._registry.items() if cls is target_class]
        except WindowNotFoundError:
            return []


# Global registry instance
_REGISTRY = WindowRegistry()


def create(name: str, **kwargs) -> Any:
    """
    Create a window structure by name.

    Args:
        name (str): Structure name or alias (case-insensitive). See
            list_windows() for canonical names.
        **kwargs: Constructor parameters, e.g. ``length`` for the
            fixed-capacity windows.

    Returns:
        A fresh structure instance.

    Raises:
        WindowNotFoundError: If the name is not recognized
        InvalidParameterError: If the constructor rejects the parameters

    Examples:
        >>> import windowstats as ws
        >>> tracker = ws.create('extremum', length=14)
        >>> sums = ws.create('rolling_sum')
        >>> with ws.create('median', length=21) as window:
        ...     window.add(1.0)
    """
    window_class = _REGISTRY.get(name)
    try:
        return window_class(**kwargs)
    except TypeError as e:
        # Convert constructor errors to our custom exception
        sig = inspect.signature(window_class.__init__)
        params = list(sig.parameters.keys())[1:]  # Skip 'self'

        raise InvalidParameterError(
            parameter_name="constructor",
            value=str(kwargs),
            expected=f"valid parameters for {name}: {params}",
            window_name=name
        ) from e


def list_windows() -> List[str]:
    """
    Get the canonical names of all available structures.

    Example:
        >>> import windowstats as ws
        >>> ws.list_windows()
        ['cumulative', 'extremum', 'order_statistic', 'paired']
    """
    return _REGISTRY.list_windows()


def describe(name: str) -> Dict[str, Any]:
    """
    Get information about a structure including parameters and documentation.

    Returns:
        Dict[str, Any]: ``name``, ``aliases``, ``parameters`` (from the
            constructor signature), ``docstring`` and ``bounded`` (whether
            the structure has a fixed capacity).

    Raises:
        WindowNotFoundError: If the name is not recognized
    """
    window_class = _REGISTRY.get(name)

    sig = inspect.signature(window_class.__init__)
    parameters = {}

    for param_name, param in sig.parameters.items():
        if param_name == 'self':
            continue

        param_info = {
            'type': param.annotation if param.annotation != inspect.Parameter.empty else 'Any',
            'default': param.default if param.default != inspect.Parameter.empty else None,
            'required': param.default == inspect.Parameter.empty
        }
        parameters[param_name] = param_info

    return {
        'name': window_class.__name__,
        'aliases': _REGISTRY.get_aliases(name),
        'parameters': parameters,
        'docstring': window_class.__doc__,
        'bounded': 'length' in parameters,
    }

