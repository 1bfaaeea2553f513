"""Error types raised by the geopeek rendering pipeline."""


class GeoPeekError(Exception):
    """Base class for every error the CLI reports and exits on."""


class InvalidGeometry(GeoPeekError):
    """A geometry violates a structural invariant (unclosed ring, too few vertices)."""


class EmptyExtent(GeoPeekError):
    """No geometries were supplied and no explicit center was given."""


class ParseError(GeoPeekError):
    """A format reader could not turn its input into geometries."""

    def __init__(self, message: str, fmt: str = None):
        self.fmt = fmt
        if fmt:
            message = f"{fmt}: {message}"
        super().__init__(message)
