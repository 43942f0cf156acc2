from .confession import ConfessionCreateRequest, ConfessionOut, HideResponse
from .feed import FeedCursorOut, FeedResponse
from .place import PlaceNotFoundOut, PlaceResolvedOut, PlaceResolveRequest
from .report import ReportAdminListResponse, ReportCreatedOut, ReportCreateRequest

__all__ = [
    "ConfessionCreateRequest",
    "ConfessionOut",
    "HideResponse",
    "FeedCursorOut",
    "FeedResponse",
    "PlaceResolveRequest",
    "PlaceResolvedOut",
    "PlaceNotFoundOut",
    "ReportCreateRequest",
    "ReportCreatedOut",
    "ReportAdminListResponse",
]
