"""
Tests for configuration, formatting and the reporting CLI.
"""

import json
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from reporting.cli import main, parse_scoring_input_from_json
from utils import Config, format_currency, format_percent, format_score


# =============================================================================
# Test: Config
# =============================================================================

class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "DATA_DIR", "CACHE_TTL_SECONDS", "TREND_YEARS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        config = Config.load()

        assert config.port == 8000
        assert config.data_dir == "./data"
        assert config.cache_ttl_seconds == 86400
        assert config.trend_years == 5
        assert config.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TREND_YEARS", "3")
        monkeypatch.setenv("ROLLING_WINDOW_MONTHS", "6")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        config = Config.load()

        assert config.trend_years == 3
        assert config.rolling_window_months == 6
        assert config.to_dict()["log_level"] == "DEBUG"

    def test_invalid_ttl_raises(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "0")
        with pytest.raises(ValueError):
            Config.load()


# =============================================================================
# Test: Formatting
# =============================================================================

class TestFormatting:

    def test_format_currency(self):
        assert format_currency(250000) == "£250,000"

    def test_format_percent_takes_fraction(self):
        assert format_percent(0.034) == "3.4%"
        assert format_percent(-0.1, decimals=0) == "-10%"

    def test_format_score(self):
        assert format_score(742) == "742/999"


# =============================================================================
# Test: CLI
# =============================================================================

class TestCli:

    def test_parse_observed_input(self):
        scoring_input = parse_scoring_input_from_json({
            "ask_price": 350000,
            "living_area": 108,
            "comparables": {"listed": [3900], "sold_30d": [3775]},
        })
        assert scoring_input.comparables.listed == (3900.0,)
        assert scoring_input.synthetic is False

    def test_parse_synthetic_input(self):
        scoring_input = parse_scoring_input_from_json(
            {"ask_price": 350000, "living_area": 108, "synthetic": True}
        )
        assert scoring_input.synthetic is True

    def test_score_command(self, tmp_path, capsys):
        input_file = tmp_path / "listing.json"
        input_file.write_text(json.dumps({
            "ask_price": 350000,
            "living_area": 108,
            "days_on_market": 21,
            "comparables": {"listed": [3900], "sold_30d": [3775]},
        }))

        assert main(["score", str(input_file)]) == 0
        output = capsys.readouterr().out
        assert "/999" in output
        assert "s1:" in output

    def test_score_command_json_output(self, tmp_path, capsys):
        input_file = tmp_path / "listing.json"
        input_file.write_text(json.dumps({"ask_price": 350000, "living_area": 108}))

        assert main(["score", str(input_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert "scores" in data

    def test_score_command_missing_file(self, tmp_path):
        assert main(["score", str(tmp_path / "missing.json")]) == 1

    def test_score_command_invalid_input(self, tmp_path):
        input_file = tmp_path / "listing.json"
        input_file.write_text(json.dumps({"ask_price": -1, "living_area": 108}))
        assert main(["score", str(input_file)]) == 1

    def test_score_command_invalid_json(self, tmp_path):
        input_file = tmp_path / "listing.json"
        input_file.write_text("{not json")
        assert main(["score", str(input_file)]) == 1

    def test_trend_command(self, tmp_path, capsys):
        line = ",".join(f'"{f}"' for f in [
            "T1", "210000", "2023-07-01 00:00", "S10 5PR", "S", "N", "F", "4", "",
            "CRIMICAR AVENUE", "", "SHEFFIELD", "SHEFFIELD", "SOUTH YORKSHIRE", "A", "A",
        ])
        (tmp_path / "land-registry-price-paid-2023.csv").write_text(line + "\n")

        code = main([
            "trend", "--postcode", "S10", "--type", "S",
            "--data-dir", str(tmp_path), "--end-year", "2023", "--years", "2",
        ])

        assert code == 0
        output = capsys.readouterr().out
        assert "Semi-detached" in output
        assert "£210,000" in output

    def test_trend_command_unknown_type(self, tmp_path):
        assert main(["trend", "--postcode", "S10", "--type", "castle", "--data-dir", str(tmp_path)]) == 1

    def test_trend_command_negative_window(self, tmp_path):
        code = main([
            "trend", "--postcode", "S10", "--type", "S",
            "--data-dir", str(tmp_path), "--window-months", "-1",
        ])
        assert code == 1
