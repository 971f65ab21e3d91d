"""Exception types raised by routespec."""


class RouteSpecError(Exception):
    """Base class for all routespec errors."""


class ConfigError(RouteSpecError):
    """Invalid configuration, raised at load time before any pass runs."""


class SourceError(RouteSpecError):
    """A declaration graph / type model dump could not be read."""


class ResolutionError(RouteSpecError):
    """A type reference could not be resolved against the type model."""

    def __init__(self, name: str):
        super().__init__(f"Unresolved type: {name}")
        self.name = name
