"""
Webhook event schema and matching rules.

HubSpot property-change webhooks arrive either as a single object or as a
batch array. Two payload shapes are seen in the wild for custom objects:
the object type is carried in ``objectTypeId`` by some subscriptions and in
``objectType`` by others, so both are accepted.
"""

from typing import Any, Iterable, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from common.config import TriggerSettings

MatchTriple = Tuple[str, str, str]


class PropertyChangeEvent(BaseModel):
    """A single HubSpot ``*.propertyChange`` webhook event."""

    object_type_id: Optional[str] = Field(default=None, alias="objectTypeId")
    object_type: Optional[str] = Field(default=None, alias="objectType")
    object_id: Optional[str] = Field(default=None, alias="objectId")
    property_name: Optional[str] = Field(default=None, alias="propertyName")
    property_value: Optional[str] = Field(default=None, alias="propertyValue")
    subscription_type: Optional[str] = Field(default=None, alias="subscriptionType")
    event_id: Optional[str] = Field(default=None, alias="eventId")
    occurred_at: Optional[Any] = Field(default=None, alias="occurredAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator(
        "object_type_id",
        "object_type",
        "object_id",
        "property_name",
        "property_value",
        "subscription_type",
        "event_id",
        mode="before",
    )
    @classmethod
    def stringify(cls, v):
        """HubSpot sends numeric IDs as JSON numbers; compare as strings."""
        if v is None:
            return v
        return str(v)

    @property
    def effective_object_type(self) -> Optional[str]:
        return self.object_type_id or self.object_type

    def triple(self) -> MatchTriple:
        return (
            self.effective_object_type or "",
            self.property_name or "",
            self.property_value or "",
        )

    @classmethod
    def from_webhook_body(cls, body: Any) -> Optional["PropertyChangeEvent"]:
        """
        Build an event from a parsed webhook body.

        Batches are reduced to their first element; an empty batch or a
        non-object body yields None.
        """
        if isinstance(body, list):
            if not body:
                return None
            body = body[0]
        if not isinstance(body, dict):
            return None
        return cls.model_validate(body)


class EventMatcher:
    """
    Decides whether an event should trigger a report sync.

    The accepted (object type, property name, property value) triples are
    explicit so that both the ``"true"`` and ``"yes"`` trigger values can be
    honoured at once.
    """

    def __init__(self, accepted: Iterable[MatchTriple]):
        self.accepted: Set[MatchTriple] = set(accepted)

    @classmethod
    def from_settings(cls, settings: TriggerSettings) -> "EventMatcher":
        return cls(
            (settings.client_object_type_id, settings.trigger_property, value)
            for value in settings.trigger_values
        )

    def matches(self, event: Optional[PropertyChangeEvent]) -> bool:
        if event is None:
            return False
        return event.triple() in self.accepted
