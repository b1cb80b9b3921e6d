"""
Settings tests
"""
import dataclasses
import math

import pytest

from dca_tuner.config import WINDOWS, EngineSettings, load_settings, resolve_window
from dca_tuner.errors import InvalidParameterError


class TestResolveWindow:
    @pytest.mark.parametrize("name, days", [("2yr", 730), ("4yr", 1460), ("8yr", 2920), ("all", None)])
    def test_named(self, name, days):
        assert resolve_window(name) == days

    def test_unbounded(self):
        assert resolve_window(None) is None
        assert resolve_window(math.inf) is None

    def test_days(self):
        assert resolve_window(90) == 90
        assert resolve_window(90.0) == 90

    @pytest.mark.parametrize("value", ["1yr", 0, -1, 1.5, -math.inf, False])
    def test_invalid(self, value):
        with pytest.raises(InvalidParameterError):
            resolve_window(value)

    def test_catalog(self):
        assert set(WINDOWS) == {"2yr", "4yr", "8yr", "all"}


class TestEngineSettings:
    def test_defaults(self):
        s = EngineSettings()
        assert s.dca_days == 1460
        assert s.zscore_days == 1460
        assert s.budget_per_day == 10.0
        assert s.temperature == 1.0
        assert s.models == ("softmax",)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineSettings().temperature = 2.0

    def test_with_overrides(self):
        base = EngineSettings()
        changed = base.with_overrides(temperature=0.5, dca_window="all")
        assert changed.temperature == 0.5
        assert changed.dca_days is None
        assert base.temperature == 1.0

    @pytest.mark.parametrize("kwargs", [
        {"temperature": 0},
        {"temperature": -0.5},
        {"temperature": float("nan")},
        {"budget_per_day": -1},
        {"dca_window": "3yr"},
        {"zscore_window": 0},
        {"models": ()},
        {"models": ("kelly",)},
        {"models": 3},
        {"timeout": 0},
        {"timeout": "30"},
        {"budget_per_day": "10"},
        {"temperature": None},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidParameterError):
            EngineSettings(**kwargs)

    def test_to_dict(self):
        d = EngineSettings().to_dict()
        assert d["dca_window"] == "4yr"
        assert d["api_base"] == "https://bitcoinresearchkit.org"


class TestLoadSettings:
    def test_load(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "dca_window: 2yr\n"
            "zscore_window: 8yr\n"
            "temperature: 0.7\n"
            "models:\n"
            "  - softmax\n",
            encoding="utf-8",
        )
        s = load_settings(path)
        assert s.dca_days == 730
        assert s.zscore_days == 2920
        assert s.temperature == 0.7
        assert s.models == ("softmax",)
        assert s.budget_per_day == 10.0

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == EngineSettings()

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("temprature: 0.5\n", encoding="utf-8")
        with pytest.raises(InvalidParameterError, match="temprature"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(InvalidParameterError):
            load_settings(path)

    @pytest.mark.parametrize("line", [
        "temperature: -2",
        "temperature: 1,5",
        "temperature: true",
        "budget_per_day: ten",
        "timeout: '30'",
        "models: kelly",
        "models: [softmax, kelly]",
        "models: {softmax: 1}",
    ])
    def test_invalid_value(self, tmp_path, line):
        path = tmp_path / "bad.yaml"
        path.write_text(line + "\n", encoding="utf-8")
        with pytest.raises(InvalidParameterError):
            load_settings(path)

    def test_single_model_scalar(self, tmp_path):
        path = tmp_path / "one.yaml"
        path.write_text("models: softmax\n", encoding="utf-8")
        assert load_settings(path).models == ("softmax",)

    def test_numbers_stored_as_float(self, tmp_path):
        path = tmp_path / "ints.yaml"
        path.write_text("budget_per_day: 5\ntimeout: 10\n", encoding="utf-8")
        s = load_settings(path)
        assert isinstance(s.budget_per_day, float) and s.budget_per_day == 5.0
        assert isinstance(s.timeout, float)

    def test_example_file(self):
        from pathlib import Path
        example = Path(__file__).resolve().parent.parent / "settings.example.yaml"
        assert load_settings(example) == EngineSettings(timeout=30)
