from .deletion_pipeline import (
    DeletionPipeline,
    DeletionQueueFullError,
    DeletionRequest,
    PipelineClosedError,
)
from .shortener_service import InvalidURLError, ShortenerService

__all__ = [
    "DeletionPipeline",
    "DeletionQueueFullError",
    "DeletionRequest",
    "InvalidURLError",
    "PipelineClosedError",
    "ShortenerService",
]
