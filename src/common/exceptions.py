"""
Custom exception classes for report sync operations.
Provides structured error handling across all handlers.
"""


class SyncException(Exception):
    """Base exception for all report sync operations"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class HubSpotAPIException(SyncException):
    """Raised when HubSpot API calls fail"""

    @property
    def status_code(self):
        return self.details.get("status_code")


class GoogleSheetsException(SyncException):
    """Raised when Google Sheets / Drive API calls fail"""

    pass


class ValidationException(SyncException):
    """Raised when data validation fails"""

    pass
