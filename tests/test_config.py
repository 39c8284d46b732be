"""
Tests for console configuration loading.
"""

import json

import pytest

from shipconsole import ConsoleConfig, ShipConsole, load_config
from shipconsole.config import CONFIG_PATH_ENV, SEED_ENV


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.delenv(SEED_ENV, raising=False)


class TestConsoleConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        config = ConsoleConfig()
        assert config.switch_values == (1, 2, 4, 8, 16, 32, 64, 128, 256)
        assert config.max_temp == 511
        assert config.phase_thresholds == {0: 31, 1: 124, 2: 452}
        assert config.max_phase == 3
        assert config.stability_delay_s == 5.0
        assert config.overload_delay_s == 10.0
        assert config.explosion_delay_s == 10.0
        assert config.log_capacity == 80
        assert config.seed is None

    def test_from_dict_overrides(self):
        config = ConsoleConfig.from_dict({"explosion_delay_s": 3.0, "seed": 42})
        assert config.explosion_delay_s == 3.0
        assert config.seed == 42
        assert config.overload_delay_s == 10.0

    def test_from_dict_coerces_json_shapes(self):
        config = ConsoleConfig.from_dict({
            "switch_values": [1, 2, 4],
            "phase_thresholds": {"0": 3, "1": 6},
        })
        assert config.switch_values == (1, 2, 4)
        assert config.max_temp == 7
        assert config.phase_thresholds == {0: 3, 1: 6}

    def test_unknown_key_rejected(self):
        with pytest.raises(KeyError):
            ConsoleConfig.from_dict({"warp_factor": 9})

    def test_config_is_immutable(self):
        config = ConsoleConfig()
        with pytest.raises(AttributeError):
            config.max_phase = 5


class TestLoadConfig:
    """Tests for file and environment overrides."""

    def test_no_overrides(self):
        assert load_config() == ConsoleConfig()

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "console.json"
        path.write_text(json.dumps({"stability_delay_s": 2.0}))
        config = load_config(path)
        assert config.stability_delay_s == 2.0

    def test_load_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "console.json"
        path.write_text(json.dumps({"log_capacity": 10}))
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        assert load_config().log_capacity == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_unknown_key_in_file(self, tmp_path):
        path = tmp_path / "console.json"
        path.write_text(json.dumps({"hyperdrive": True}))
        with pytest.raises(KeyError):
            load_config(path)

    def test_seed_from_env(self, monkeypatch):
        monkeypatch.setenv(SEED_ENV, "1234")
        assert load_config().seed == 1234


class TestConfiguredConsole:
    """Tests for consoles built from non-default configs."""

    def test_shorter_stability_delay(self):
        config = ConsoleConfig.from_dict({"stability_delay_s": 1.0})
        console = ShipConsole(config=config, seed=1)
        for value in (1, 2, 4, 8, 16):
            console.toggle_switch(value)
        console.advance(2.5)
        assert console.reactor.phase == 1

    def test_config_seed_used_when_none_given(self):
        config = ConsoleConfig.from_dict({"seed": 5})
        assert ShipConsole(config=config).seed == 5
        assert ShipConsole(config=config, seed=9).seed == 9

    def test_same_seed_same_fracture_site(self):
        sites = {ShipConsole(seed=21).lifesupport.fracture_site for _ in range(5)}
        assert len(sites) == 1

    def test_log_capacity(self):
        config = ConsoleConfig.from_dict({"log_capacity": 5})
        console = ShipConsole(config=config, seed=1)
        for _ in range(10):
            console.toggle_switch(1)
        assert len(console.log) == 5
