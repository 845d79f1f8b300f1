from .base import TimestampedModel, UUIDModel
from .run import AnalysisRun

__all__ = ["TimestampedModel", "UUIDModel", "AnalysisRun"]
