from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pricefeed.core.clock import parse_duration

"""
Configuration for a price store deployment.
"""

DEFAULT_TOLERANCE_S = 900


class PriceFeedConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(min_length=1, description="Identity allowed to push prices")
    tolerance: int = Field(
        default=DEFAULT_TOLERANCE_S,
        ge=0,
        description="Max lead (seconds) of a publish time over the current time",
    )
    test_mode: bool = Field(
        default=False, description="Use a settable SimClock instead of wall-clock time"
    )
    start_time: Optional[int] = Field(
        default=None, ge=0, description="Initial SimClock time (test mode only)"
    )

    @field_validator("tolerance", mode="before")
    @classmethod
    def _parse_tolerance(cls, value: Union[int, str]) -> Any:
        # accept "15m" / "900s" style durations besides plain seconds
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @model_validator(mode="after")
    def _start_time_requires_test_mode(self) -> "PriceFeedConfig":
        if self.start_time is not None and not self.test_mode:
            raise ValueError("start_time is only allowed when test_mode is enabled")
        return self


@dataclass(frozen=True)
class ResolvedConfig:
    config: PriceFeedConfig
    layered_config: Mapping[str, Any]
    config_hash: str
    config_keys_total: int
