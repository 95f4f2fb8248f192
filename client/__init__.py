# API client
from .api import ApiError, TrackerClient

__all__ = ["ApiError", "TrackerClient"]
