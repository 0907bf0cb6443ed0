"""Alert model matching the Alertmanager v1 ingestion schema."""

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from pydantic import Field, field_serializer, field_validator

from junit2alertmanager.models.base import Model


class Alert(Model):
    """Alert posted to ``/api/v1/alerts``.

    Field names are snake_case in Python; ``model_dump(by_alias=True)``
    produces the camelCase keys the receiver expects. Labels and annotations
    are read-only views, so an alert cannot change after it is built.
    """

    starts_at: datetime = Field(..., alias="startsAt")
    ends_at: datetime = Field(..., alias="endsAt")
    labels: Mapping[str, str] = Field(..., description="Must contain alertname")
    generator_url: str = Field(default="", alias="generatorURL")
    annotations: Mapping[str, str] = Field(
        ..., description="Contains summary and description"
    )

    @field_validator("labels", "annotations", mode="after")
    @classmethod
    def freeze_mapping(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("labels", "annotations")
    def dump_mapping(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    @property
    def alert_name(self) -> str:
        """Return the alertname label."""
        return self.labels["alertname"]
