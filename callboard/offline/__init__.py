from .client import CallboardAPIError, CallboardClient, CallboardClientError, ClientSettings, OfflineError
from .mirror import OfflineMirror, Snapshot, build_print_sheet, print_sheet_csv

__all__ = [
    "CallboardAPIError",
    "CallboardClient",
    "CallboardClientError",
    "ClientSettings",
    "OfflineError",
    "OfflineMirror",
    "Snapshot",
    "build_print_sheet",
    "print_sheet_csv",
]
