# src/pagecraft/errors.py


class ConversionError(Exception):
    """Base class for errors raised by the conversion engine."""


class InvalidInput(ConversionError, ValueError):
    """
    Raised when the forward conversion receives a non-string or empty input.
    No partial result is produced.
    """


class SerializationFailure(ConversionError):
    """
    Raised when a tree cannot be rendered: unknown node kind, nested root,
    shared or cyclic nodes, or props that violate the per-kind schema.
    Only trees built outside the engine can trigger this.
    """
