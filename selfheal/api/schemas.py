"""Pydantic request/response schemas for the webhook API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from selfheal.models.alerts import Alert, AlertLabels


class AlertPayload(BaseModel):
    """One entry of Alertmanager's ``alerts`` array.

    Alertmanager sends more fields than these (fingerprint, generatorURL, ...);
    they are ignored. ``status`` is kept as sent; anything other than
    ``firing`` is ignored per alert rather than rejecting the batch.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    status: str = ""
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")

    def to_alert(self) -> Alert:
        return Alert(
            labels=AlertLabels(dict(self.labels)),
            status=self.status,
            annotations=dict(self.annotations),
            starts_at=self.starts_at,
            ends_at=self.ends_at,
        )


class WebhookPayload(BaseModel):
    """Alertmanager webhook body (``version: "4"``)."""

    model_config = ConfigDict(extra="ignore")

    alerts: list[AlertPayload] = Field(default_factory=list)

    def to_batch(self) -> list[Alert]:
        return [payload.to_alert() for payload in self.alerts]


class StatusResponse(BaseModel):
    """Diagnostic snapshot returned by ``GET /status``."""

    version: str
    cooldown_window_seconds: float
    cooldowns_active: int
    counters: dict[str, dict[str, int]]


class ErrorResponse(BaseModel):
    """Uniform error envelope."""

    error: str
    detail: str
