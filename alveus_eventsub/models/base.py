"""Common base for Helix response models."""

from pydantic import BaseModel, ConfigDict


class HelixModel(BaseModel):
    """Strictly typed, read-only view of a Helix payload.

    Unknown keys are dropped; missing or mistyped keys fail validation.
    """

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class Pagination(HelixModel):
    cursor: str | None = None
