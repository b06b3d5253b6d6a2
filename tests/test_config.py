import json

import pytest

from counter_mcp.shared.config import (
    DEFAULT_INSTRUCTIONS,
    SERVER_NAME,
    AppConfig,
    CounterConfig,
    load_config,
)


def test_defaults_without_path():
    config = load_config()
    assert config == AppConfig()
    assert config.server.name == SERVER_NAME
    assert config.server.instructions == DEFAULT_INSTRUCTIONS
    assert config.counter.overflow == "unbounded"
    assert config.counter.bits == 32
    assert config.logging.level == "INFO"
    assert config.logging.file is None


def test_load_from_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "server": {"name": "demo", "instructions": None},
                "counter": {"overflow": "wrap", "bits": 16},
                "logging": {"level": "debug"},
                "extra": {"ignored": True},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.server.name == "demo"
    assert config.server.instructions is None
    assert config.counter == CounterConfig(overflow="wrap", bits=16)
    assert config.logging.level == "debug"


def test_invalid_overflow_policy_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"counter": {"overflow": "explode"}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_invalid_bits_rejected():
    with pytest.raises(ValueError):
        CounterConfig(bits=1)
