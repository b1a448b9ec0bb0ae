"""Exception classes for the windowed-statistics engine."""

from typing import Any, List, Optional


class WindowStatsError(Exception):
    """Base exception for window structure errors."""

    def __init__(self, message: str, window_name: Optional[str] = None):
        self.window_name = window_name
        if window_name:
            message = f"[{window_name}] {message}"
        super().__init__(message)


class InvalidParameterError(WindowStatsError):
    """Invalid constructor or query parameters."""

    def __init__(self, parameter_name: str, value: Any, expected: str, window_name: Optional[str] = None):
        message = f"Invalid parameter '{parameter_name}': got {value}, expected {expected}"
        super().__init__(message, window_name)
        self.parameter_name = parameter_name
        self.value = value
        self.expected = expected


class WindowReleasedError(WindowStatsError):
    """Pooled storage was used after it had been released."""

    def __init__(self, operation: str, window_name: Optional[str] = None):
        message = f"Cannot {operation}: storage has already been released"
        super().__init__(message, window_name)
        self.operation = operation


class WindowNotFoundError(WindowStatsError):
    """Unknown window structure requested."""

    def __init__(self, window_name: str, available_windows: Optional[List[str]] = None):
        if available_windows:
            available_str = ", ".join(sorted(available_windows))
            message = f"Unknown window '{window_name}'. Available windows: {available_str}"
        else:
            message = f"Unknown window '{window_name}'"
        super().__init__(message)
        self.window_name = window_name
        self.available_windows = available_windows or []
