"""Error types raised by the asset feed."""
from fastapi import status


class FrameError(Exception):
    """Base exception for asset feed errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TransientPoolError(FrameError):
    """A remote candidate query failed. Not retried here."""
    def __init__(self, message: str):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)


class ExhaustedError(FrameError):
    """A deck refill produced no usable candidates."""
    def __init__(self, message: str = "No candidates available for exhaustive shuffle."):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class AssetNotFoundError(FrameError):
    """The photo server returned nothing for the requested asset."""
    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"Asset {asset_id} was not found!", status.HTTP_404_NOT_FOUND)


class CacheIOError(FrameError):
    """A cache directory or file operation failed."""
    def __init__(self, message: str):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class RemoteApiError(FrameError):
    """The photo server answered with an error response."""
    def __init__(self, message: str, remote_status: int):
        self.remote_status = remote_status
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)
