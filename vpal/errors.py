class PaletteError(Exception):
    """Base class for errors raised by vpal."""


class InvalidArgumentError(PaletteError, ValueError):
    """A caller passed a value outside the accepted domain (e.g. alpha > 255)."""


class InvariantViolationError(PaletteError, RuntimeError):
    """Internal contract broken by the caller, such as splitting a single-color box."""
