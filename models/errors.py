"""
Error kinds raised by the inpainting core.

Every error carries a message that is safe to show to the user as-is.
"""


class InpaintError(Exception):
    """Base class for all recoverable inpainting errors."""


class EngineUnavailable(InpaintError):
    """The algorithmic backend is missing or not ready."""

    def __init__(self, message: str = "Inpainting engine is still loading. Please wait a moment and try again."):
        super().__init__(message)


class MissingMask(InpaintError):
    """A removal request arrived with no painted coverage."""

    def __init__(self, message: str = "No mask provided. Paint over the area you want to remove first."):
        super().__init__(message)


class DimensionMismatch(InpaintError, ValueError):
    """Source and mask sizes disagree after reconciliation."""


class UnsupportedFormat(InpaintError, ValueError):
    """Unexpected channel count or sample type."""


class DecodeFailure(InpaintError):
    """The source or mask payload could not be decoded."""


class PipelineBusy(InpaintError):
    """An inpainting run is already in flight."""

    def __init__(self, message: str = "An inpainting run is already in progress. Please wait for it to finish."):
        super().__init__(message)


class StrokeStateError(InpaintError, RuntimeError):
    """Mask Builder called out of order (e.g. continue_stroke while idle)."""
