from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from astrogate.domain.entities.plan import UNLIMITED, Quota


class ApiModel(BaseModel):
    """Response model serialized with camelCase keys for the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def quota_or_none(value: Quota) -> int | None:
    """JSON has no infinity; unlimited quotas are sent as ``null``."""
    if value == UNLIMITED:
        return None
    return int(value)
