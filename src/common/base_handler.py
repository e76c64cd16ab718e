"""
Base handler class implementing Template Method pattern for Lambda functions.
Provides consistent error handling, client initialization, and logging.
"""

from abc import ABC, abstractmethod
import base64
import json
import logging
import os
from typing import Any, Optional


class BaseLambdaHandler(ABC):
    """
    Abstract base class for Lambda handlers with common functionality.

    Subclasses must implement _execute() method with their specific logic.
    Clients may be injected (tests, local runs); otherwise they are built
    lazily from the environment on first use.
    """

    # HTTP methods accepted by handle(); None accepts any
    allowed_methods: Optional[tuple] = None

    def __init__(self, hubspot_client=None, sheets_client=None, settings=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))
        self._hubspot_client = hubspot_client
        self._sheets_client = sheets_client
        self._settings = settings

    @property
    def settings(self):
        """Lazy load of report settings from the environment"""
        if self._settings is None:
            from common.config import ReportSettings

            self._settings = ReportSettings.from_env()
        return self._settings

    @property
    def hubspot_client(self):
        """Lazy initialization of HubSpot client"""
        if self._hubspot_client is None:
            from common.hubspot_client import HubSpotClient

            self._hubspot_client = HubSpotClient(
                client_object_type_id=self.settings.client_object_type_id
            )
        return self._hubspot_client

    @property
    def sheets_client(self):
        """Lazy initialization of Google Sheets client"""
        if self._sheets_client is None:
            from common.sheets_client import GoogleSheetsClient

            self._sheets_client = GoogleSheetsClient(
                logo_row_height=self.settings.logo_row_height
            )
        return self._sheets_client

    def handle(self, event: Any, context: dict) -> dict:
        """
        Main entry point for Lambda handler (Template Method).

        Args:
            event: Lambda event dict
            context: Lambda context

        Returns:
            HTTP response dict with statusCode and body
        """
        method = self._http_method(event)
        if self.allowed_methods and method not in self.allowed_methods:
            self.logger.info(f"Rejected {method} request")
            return self._error_response("Method not allowed", 405)

        try:
            self.logger.info(f"Received event: {json.dumps(event, default=str)}")
            result = self._execute(event, context)
            self.logger.info("Handler completed successfully")
            return result
        except Exception as e:
            self.logger.error(f"Handler error: {e}", exc_info=True)
            return self._error_response("Internal server error", 500, details=str(e))

    @abstractmethod
    def _execute(self, event: dict, context: dict) -> dict:
        """
        Subclasses implement their specific business logic here.

        Args:
            event: Lambda event dict
            context: Lambda context

        Returns:
            HTTP response dict
        """
        pass

    def _success_response(self, data: Any, status_code: int = 200) -> dict:
        """Standard success response format"""
        return {
            "statusCode": status_code,
            "headers": {
                "Content-Type": "application/json",
                "Access-Control-Allow-Origin": "*",
            },
            "body": json.dumps(data, default=str),
        }

    def _error_response(
        self, message: str, status_code: int, details: Optional[str] = None
    ) -> dict:
        """Standard error response format"""
        body = {"error": message}
        if details is not None:
            body["details"] = details
        return {
            "statusCode": status_code,
            "headers": {
                "Content-Type": "application/json",
                "Access-Control-Allow-Origin": "*",
            },
            "body": json.dumps(body),
        }

    @staticmethod
    def _http_method(event: Any) -> str:
        """
        HTTP method from an API Gateway REST (v1) or HTTP API (v2) event.
        Direct invocations carry neither and are treated as POST; their
        payload may be a bare webhook batch (a list).
        """
        if not isinstance(event, dict):
            return "POST"
        method = event.get("httpMethod") or (
            (event.get("requestContext") or {}).get("http", {}).get("method")
        )
        return (method or "POST").upper()

    def _parse_webhook_body(self, event: dict) -> Any:
        """Parse webhook body handling base64 encoding"""
        body = event.get("body", "")

        if event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")

        if isinstance(body, str):
            if body:  # Only parse non-empty strings
                return json.loads(body)
            return {}

        return body
