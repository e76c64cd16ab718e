"""
Runtime configuration for the client report webhook.

Everything comes from the Lambda environment. Credentials are read lazily by
the API clients; this module only covers the event matching rules and the
report presentation switches.
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CLIENT_OBJECT_TYPE_ID = "2-46236743"
DEFAULT_TRIGGER_PROPERTY = "report"
DEFAULT_TRIGGER_VALUES = ("true", "yes")

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class TriggerSettings(BaseModel):
    """Which property-change events start a report sync."""

    client_object_type_id: str = DEFAULT_CLIENT_OBJECT_TYPE_ID
    trigger_property: str = DEFAULT_TRIGGER_PROPERTY
    trigger_values: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRIGGER_VALUES)
    )

    @field_validator("trigger_values")
    @classmethod
    def require_trigger_values(cls, v):
        if not v:
            raise ValueError("At least one trigger value is required")
        return v

    @classmethod
    def _env_values(cls) -> dict:
        return {
            "client_object_type_id": os.getenv(
                "CLIENT_OBJECT_TYPE_ID", DEFAULT_CLIENT_OBJECT_TYPE_ID
            ),
            "trigger_property": os.getenv(
                "REPORT_TRIGGER_PROPERTY", DEFAULT_TRIGGER_PROPERTY
            ),
            "trigger_values": _split_csv(
                os.getenv("REPORT_TRIGGER_VALUES", ",".join(DEFAULT_TRIGGER_VALUES))
            ),
        }

    @classmethod
    def from_env(cls):
        return cls(**cls._env_values())


class ReportSettings(TriggerSettings):
    """Trigger settings plus the report sheet presentation switches."""

    public_write: bool = False
    logo_row_height: Optional[int] = None

    @field_validator("logo_row_height", mode="before")
    @classmethod
    def blank_row_height(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("logo_row_height")
    @classmethod
    def positive_row_height(cls, v):
        if v is not None and v <= 0:
            raise ValueError("logo_row_height must be positive")
        return v

    @property
    def share_roles(self) -> List[str]:
        """Drive roles granted to 'anyone' on a freshly created report."""
        if self.public_write:
            return ["reader", "writer"]
        return ["reader"]

    @classmethod
    def _env_values(cls) -> dict:
        values = super()._env_values()
        values["public_write"] = (
            os.getenv("REPORT_PUBLIC_WRITE", "false").lower() in _TRUTHY
        )
        # Left as text so a bad value fails validation with the field name
        values["logo_row_height"] = os.getenv("REPORT_LOGO_ROW_HEIGHT", "").strip()
        return values
