from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import orjson
from pydantic import ValidationError

from pricefeed.config.configs import PriceFeedConfig, ResolvedConfig
from pricefeed.core.utility import (
    canonical_hash,
    count_leaves,
    deep_merge,
    insert_path,
    validation_error_parser,
)
from pricefeed.errors.errors import ConfigurationError
from pricefeed.ports.telemetry import Telemetry

"""
Purpose:
    - Merge configuration layers (defaults < file < env < cli)
    - Validate the merged mapping against PriceFeedConfig
    - Report validation failures once through telemetry, then raise ConfigurationError
"""

COMPONENT = "config_loader"


def parse_cli_overrides(pairs: list[str]) -> dict[str, Any]:
    """Turn repeated ``--set key=value`` flags into a nested mapping."""
    overrides: dict[str, Any] = {}

    for item in pairs:
        key, sep, value = item.partition("=")
        if sep == "":
            raise ConfigurationError(
                f"--set requires KEY=VALUE format (got {item!r})", component=COMPONENT
            )
        try:
            insert_path(overrides, key, value)
        except ValueError as exc:
            raise ConfigurationError(str(exc), field=key, component=COMPONENT) from exc
    return overrides


def load_file_config(path: Path) -> Mapping[str, Any]:
    """Read a JSON config file; the top level must be an object."""
    try:
        raw = orjson.loads(Path(path).read_bytes())
    except OSError as exc:
        raise ConfigurationError(
            f"cannot read config file: {exc}", field="config", value=path, component=COMPONENT
        ) from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigurationError(
            f"config file is not valid JSON: {exc}",
            field="config",
            value=path,
            component=COMPONENT,
        ) from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(
            "config file must deserialize to an object",
            field="config",
            value=path,
            component=COMPONENT,
        )
    return raw


class ConfigLoader:
    def __init__(self, telemetry: Optional[Telemetry] = None) -> None:
        self.telemetry = telemetry

    def resolve(
        self,
        defaults: Mapping[str, Any],
        file_cfg: Optional[Mapping[str, Any]] = None,
        env_cfg: Optional[Mapping[str, Any]] = None,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> ResolvedConfig:
        """
        1. Merge layers sequentially (later layers win, nested mappings are merged)
        2. Validate the merged mapping with pydantic
        3. Hash the validated, key-sorted config
        """
        merged: Mapping[str, Any] = dict(defaults)
        for layer in (file_cfg, env_cfg, cli_overrides):
            if layer:
                merged = deep_merge(merged, layer)

        try:
            config = PriceFeedConfig(**merged)
        except ValidationError as e:
            parsed_error = validation_error_parser(e)
            if self.telemetry is not None:
                self.telemetry.log(
                    "config_validation_error",
                    component=COMPONENT,
                    errors=parsed_error,
                )
            paths = ", ".join(sorted({err["path"] or "<root>" for err in parsed_error}))
            raise ConfigurationError(
                f"invalid configuration: {paths}",
                field=paths,
                component=COMPONENT,
                details={"errors": parsed_error},
            ) from e

        validated = config.model_dump()
        config_hash = canonical_hash(validated)
        keys_total = count_leaves(validated)

        if self.telemetry is not None:
            self.telemetry.log(
                "config_resolved",
                component=COMPONENT,
                config_hash=config_hash,
                config_keys_total=keys_total,
            )

        return ResolvedConfig(
            config=config,
            layered_config=merged,
            config_hash=config_hash,
            config_keys_total=keys_total,
        )
