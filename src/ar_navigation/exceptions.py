"""Exceptions raised by the navigation engine and its collaborators."""


class NavigationError(Exception):
    """Base navigation exception."""


class LocationUnavailable(NavigationError):
    """Raised when the platform denies or lacks a location capability."""


class RouteUnavailable(NavigationError):
    """Raised when the routing service fails or returns no path."""


class PreconditionViolation(NavigationError):
    """Raised when an engine component is called without the state it requires."""
