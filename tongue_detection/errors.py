"""Exception types raised by the tongue detection package."""


class TongueDetectionError(Exception):
    """Base class for tongue detection errors."""


class InputShapeError(TongueDetectionError, ValueError):
    """Pixel buffer does not match the declared image dimensions."""


class BackendFailure(TongueDetectionError):
    """A substituted detection backend raised while detecting.

    Never propagated out of ``detect_with_fallback``; it is attached to the
    returned result so callers can report it.
    """

    def __init__(self, backend_name: str, cause: BaseException):
        super().__init__(f"{backend_name} failed: {cause}")
        self.backend_name = backend_name
        self.cause = cause
