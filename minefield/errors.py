"""Exceptions raised by the minefield package."""


class MinefieldError(Exception):
    """Base class for all minefield errors."""


class ConfigurationError(MinefieldError, ValueError):
    """Board parameters or restored data cannot describe a playable game."""


class RegionTooLargeError(MinefieldError, RuntimeError):
    """A solver region has more unknown cells than the enumeration ceiling allows."""

    def __init__(self, variables_count: int, ceiling: int) -> None:
        super().__init__(
            f"Region has {variables_count} unknown cells; "
            f"exhaustive enumeration is capped at {ceiling}."
        )
        self.variables_count = variables_count
        self.ceiling = ceiling
