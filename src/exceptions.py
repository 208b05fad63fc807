"""
Error types raised by the vectorization pipeline
"""
from typing import Optional


class VectorizerError(Exception):
    """Base class for all pipeline errors"""


class InvalidInputError(VectorizerError, ValueError):
    """Input rejected before any pixel processing"""


class DecodeError(VectorizerError, ValueError):
    """The image bytes could not be decoded"""


class NoEdgesFoundError(VectorizerError):
    """Tracing produced no paths; retry with a lower threshold"""

    def __init__(self, message: Optional[str] = None, threshold: Optional[float] = None):
        self.threshold = threshold
        super().__init__(
            message
            or "No significant edges found in the image. Try adjusting the sensitivity."
        )


class ProcessingError(VectorizerError, RuntimeError):
    """Unexpected failure inside a pipeline stage"""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
