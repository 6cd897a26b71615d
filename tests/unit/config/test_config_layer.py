import json

import pytest
from pydantic import ValidationError

from pricefeed.config.config_loader import ConfigLoader, load_file_config, parse_cli_overrides
from pricefeed.config.configs import DEFAULT_TOLERANCE_S, PriceFeedConfig
from pricefeed.core.clock import RealtimeClock, SimClock
from pricefeed.core.factory import build_clock, build_store
from pricefeed.errors.errors import ConfigurationError

# --- PriceFeedConfig ---


def test_config_defaults():
    cfg = PriceFeedConfig(owner="0xowner")
    assert cfg.tolerance == DEFAULT_TOLERANCE_S == 900
    assert cfg.test_mode is False
    assert cfg.start_time is None


def test_config_parses_duration_strings():
    assert PriceFeedConfig(owner="o", tolerance="15m").tolerance == 900
    assert PriceFeedConfig(owner="o", tolerance="120").tolerance == 120


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"owner": ""},
        {"owner": "o", "tolerance": -1},
        {"owner": "o", "tolerance": "soon"},
        {"owner": "o", "unknown": 1},
        {"owner": "o", "start_time": 10},
        {"owner": "o", "test_mode": True, "start_time": -5},
    ],
)
def test_config_rejects_invalid(kwargs):
    with pytest.raises(ValidationError):
        PriceFeedConfig(**kwargs)


def test_config_is_frozen():
    cfg = PriceFeedConfig(owner="o")
    with pytest.raises(ValidationError):
        cfg.tolerance = 1


# --- ConfigLoader ---


def test_resolve_precedence(telemetry):
    loader = ConfigLoader(telemetry)
    resolved = loader.resolve(
        defaults={"owner": "default", "tolerance": 900},
        file_cfg={"owner": "from_file", "tolerance": 60},
        env_cfg={"tolerance": "120"},
        cli_overrides={"tolerance": "5m"},
    )

    assert resolved.config.owner == "from_file"
    assert resolved.config.tolerance == 300
    assert resolved.config_keys_total == 4
    assert len(resolved.config_hash) == 64
    assert telemetry.names() == ["config_resolved"]


def test_resolve_hash_is_stable_across_layer_spelling():
    loader = ConfigLoader()
    a = loader.resolve(defaults={"owner": "o", "tolerance": 900})
    b = loader.resolve(defaults={"owner": "o"}, cli_overrides={"tolerance": "15m"})
    c = loader.resolve(defaults={"owner": "o", "tolerance": 901})

    assert a.config_hash == b.config_hash
    assert a.config_hash != c.config_hash


def test_resolve_reports_validation_errors(telemetry):
    loader = ConfigLoader(telemetry)

    with pytest.raises(ConfigurationError) as exc_info:
        loader.resolve(defaults={"tolerance": 900})

    assert "owner" in str(exc_info.value)
    assert telemetry.names() == ["config_validation_error"]
    _, fields = telemetry.events[0]
    assert fields["errors"][0]["path"] == "owner"
    assert fields["errors"][0]["error_type"] == "missing"


# --- CLI overrides / files ---


def test_parse_cli_overrides():
    assert parse_cli_overrides(["owner=0xabc", "tolerance=60"]) == {
        "owner": "0xabc",
        "tolerance": "60",
    }
    assert parse_cli_overrides(["a.b=1"]) == {"a": {"b": "1"}}


@pytest.mark.parametrize("pairs", [["owner"], ["=1"], ["a=1", "a.b=2"]])
def test_parse_cli_overrides_invalid(pairs):
    with pytest.raises(ConfigurationError):
        parse_cli_overrides(pairs)


def test_load_file_config(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"owner": "0xfile", "tolerance": "1h"}))
    assert load_file_config(path) == {"owner": "0xfile", "tolerance": "1h"}


def test_load_file_config_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_file_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_file_config(broken)

    array = tmp_path / "array.json"
    array.write_text("[1, 2]")
    with pytest.raises(ConfigurationError):
        load_file_config(array)


# --- Factory ---


def test_build_clock_follows_test_mode():
    sim = build_clock(PriceFeedConfig(owner="o", test_mode=True, start_time=1000))
    assert isinstance(sim, SimClock)
    assert sim.now() == 1000

    assert isinstance(build_clock(PriceFeedConfig(owner="o")), RealtimeClock)


def test_build_store_uses_config():
    store = build_store(PriceFeedConfig(owner="0xowner", tolerance=60, test_mode=True))
    assert store.owner == "0xowner"
    assert store.tolerance == 60
    store.set_current_time(1000)
    assert store.current_time() == 1000
