"""Session configuration model."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator, model_validator

from mpusb.constants import (
    I2C_ADDRESS_MAX,
    I2C_ADDRESS_MIN,
    PROBE_MAX_DEFAULT,
    PROBE_MIN_DEFAULT,
)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class SessionConfig(BaseModel):
    """Bus probing and tracing settings for a Session.

    ``probe_min``/``probe_max`` bound the inclusive address window
    scanned for peripherals behind I2C boards.
    """

    model_config = {"frozen": True}

    probe_min: int = Field(
        default=PROBE_MIN_DEFAULT, description="Lowest I2C address probed"
    )
    probe_max: int = Field(
        default=PROBE_MAX_DEFAULT, description="Highest I2C address probed"
    )
    debug: bool = Field(default=False, description="Verbose transport tracing")

    @field_validator("probe_min", "probe_max")
    @classmethod
    def validate_address(cls, v: int) -> int:
        if not I2C_ADDRESS_MIN <= v <= I2C_ADDRESS_MAX:
            raise ValueError(f"probe address {v} is outside 0x00-0x7F")
        return v

    @model_validator(mode="after")
    def validate_range(self) -> SessionConfig:
        if self.probe_min > self.probe_max:
            raise ValueError(
                f"probe_min ({self.probe_min}) is greater than probe_max ({self.probe_max})"
            )
        return self

    @property
    def probe_range(self) -> range:
        return range(self.probe_min, self.probe_max + 1)

    def with_updates(self, **changes: object) -> SessionConfig:
        """Return a validated copy with *changes* applied."""
        return SessionConfig.model_validate({**self.model_dump(), **changes})

    @classmethod
    def from_env(cls) -> SessionConfig:
        """Build a config from defaults overridden by environment variables.

        Reads ``MPUSB_PROBE_MIN``, ``MPUSB_PROBE_MAX`` (decimal or 0x-prefixed
        hex) and ``MPUSB_DEBUG``.
        """
        values: dict[str, object] = {}
        for key, env_name in (("probe_min", "MPUSB_PROBE_MIN"), ("probe_max", "MPUSB_PROBE_MAX")):
            raw = os.environ.get(env_name)
            if raw:
                try:
                    values[key] = int(raw, 0)
                except ValueError as exc:
                    raise ValueError(f"{env_name}={raw!r} is not an integer") from exc
        debug = os.environ.get("MPUSB_DEBUG")
        if debug:
            values["debug"] = debug.strip().lower() in _TRUE_VALUES
        return cls.model_validate(values)
