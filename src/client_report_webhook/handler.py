"""
Lambda handler: Client Report Webhook

Triggered by a HubSpot propertyChange webhook on the custom 'Client' object.
When the trigger property (``report`` by default) is set to an accepted value,
this handler builds the client's deals report in Google Sheets:

- No report_url on the client → create a sheet, share it, store its URL
- Existing report_url → reuse that sheet

Either way the sheet is cleared and rewritten with the current deals.

Event structure from HubSpot (single object or a batch array; only the first
element of a batch is used):
{
    "objectTypeId": "2-46236743",
    "objectId": 123,
    "propertyName": "report",
    "propertyValue": "true",
    "subscriptionType": "object.propertyChange"
}
"""

from common.base_handler import BaseLambdaHandler
from common.config import TriggerSettings
from common.events import EventMatcher, PropertyChangeEvent
from common.exceptions import ValidationException
from common.report_service import ReportSyncService


class ClientReportWebhookHandler(BaseLambdaHandler):
    """Handler for syncing a HubSpot client's deals into its report sheet."""

    allowed_methods = ("POST",)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._matcher = None
        self._report_service = None

    @property
    def matcher(self) -> EventMatcher:
        # Matching needs only the trigger settings, so a bad presentation
        # switch cannot break acknowledgement of unrelated events
        if self._matcher is None:
            settings = self._settings
            if settings is None:
                settings = TriggerSettings.from_env()
            self._matcher = EventMatcher.from_settings(settings)
        return self._matcher

    @property
    def report_service(self) -> ReportSyncService:
        if self._report_service is None:
            self._report_service = ReportSyncService(
                self.hubspot_client,
                self.sheets_client,
                share_roles=self.settings.share_roles,
            )
        return self._report_service

    def _execute(self, event, context: dict) -> dict:
        # Direct invocations pass the webhook payload (object or batch) as the event
        if isinstance(event, dict) and "body" in event:
            body = self._parse_webhook_body(event)
        else:
            body = event

        webhook_event = PropertyChangeEvent.from_webhook_body(body)

        # Acknowledge anything else so HubSpot does not retry or alert
        if not self.matcher.matches(webhook_event):
            self.logger.info("Event does not match report trigger, skipping")
            return self._success_response(
                {"message": "Webhook received but not processed"}
            )

        client_id = webhook_event.object_id
        if not client_id:
            raise ValidationException("Webhook event has no objectId")

        result = self.report_service.sync_client_report(client_id)

        self.logger.info(
            "Report for client %s %s: %s",
            client_id,
            "created" if result.is_new_sheet else "refreshed",
            result.sheet_url,
        )
        return self._success_response(result.to_response())


def lambda_handler(event: dict, context) -> dict:
    """Lambda entry point."""
    handler = ClientReportWebhookHandler()
    return handler.handle(event, context)
