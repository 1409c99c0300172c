"""Tests for engine.control.config and engine.control.config_loader."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from engine.control.config import ControllerConfig
from engine.control.config_loader import (
    FORMATS,
    build_config,
    load_config,
    parse_csv_config,
    parse_json_config,
)
from engine.control.exceptions import ConfigError


# ======================================================================
# ControllerConfig model
# ======================================================================


class TestControllerConfig:

    def test_aliases_map_to_attributes(self, controller_config):
        assert controller_config.v_ref_upper == 241.0
        assert controller_config.ki_lower == 0.1
        assert controller_config.soc_min == 0.15
        assert controller_config.soc_transition_width == 0.05

    def test_thresholds(self, controller_config):
        assert controller_config.overvoltage_threshold == pytest.approx(243.0)
        assert controller_config.undervoltage_threshold == pytest.approx(196.0)

    def test_accepts_attribute_names(self, controller_config):
        data = controller_config.model_dump()
        assert ControllerConfig.model_validate(data) == controller_config

    def test_is_immutable(self, controller_config):
        with pytest.raises(ValidationError):
            controller_config.v_ref_upper = 250.0

    def test_voltage_ordering_enforced(self, config_values):
        with pytest.raises(ValidationError, match="V_ref_lower"):
            ControllerConfig.model_validate({**config_values, "V_ref_lower": 250.0})

    def test_soc_ordering_enforced(self, config_values):
        with pytest.raises(ValidationError, match="SOC_min"):
            ControllerConfig.model_validate({**config_values, "SOC_min": 0.95})

    @pytest.mark.parametrize("key", ["Deadband_upper", "P_step_max", "P_discharge_max"])
    def test_negative_limits_rejected(self, config_values, key):
        with pytest.raises(ValidationError, match=key):
            ControllerConfig.model_validate({**config_values, key: -1.0})

    def test_non_finite_rejected(self, config_values):
        with pytest.raises(ValidationError):
            ControllerConfig.model_validate({**config_values, "Kp_upper": float("inf")})


# ======================================================================
# CSV format
# ======================================================================


class TestCsvFormat:

    def test_load(self, csv_config_file, controller_config):
        assert load_config(csv_config_file) == controller_config

    def test_comments_blank_lines_and_whitespace(self):
        values = parse_csv_config("# header\n\n  V_ref_upper , 241.5 \n\r\n")
        assert values == {"V_ref_upper": 241.5}

    def test_extra_columns_ignored(self):
        assert parse_csv_config("P_step_max,10,kW\n") == {"P_step_max": 10.0}

    def test_unknown_key_warned_and_skipped(self, caplog):
        caplog.set_level(logging.WARNING, logger="engine.control.config_loader")
        values = parse_csv_config("V_ref_upper,241\nFoo,1\n")
        assert values == {"V_ref_upper": 241.0}
        assert "unknown configuration key 'Foo'" in caplog.text
        assert "Line 2" in caplog.text

    def test_malformed_line_warned_and_skipped(self, caplog):
        caplog.set_level(logging.WARNING, logger="engine.control.config_loader")
        values = parse_csv_config("V_ref_upper\nV_ref_lower,\nSOC_max,0.9\n")
        assert values == {"SOC_max": 0.9}
        assert caplog.text.count("malformed entry") == 2

    def test_non_numeric_value(self):
        with pytest.raises(ConfigError, match="Kp_upper must be numeric.*line 1"):
            parse_csv_config("Kp_upper,fast\n")

    def test_missing_field(self, tmp_path, config_values):
        del config_values["SOC_min"]
        path = tmp_path / "partial.csv"
        path.write_text("\n".join(f"{k},{v}" for k, v in config_values.items()))
        with pytest.raises(ConfigError, match="SOC_min"):
            load_config(path)

    def test_duplicate_key_keeps_last_and_warns(self, caplog):
        caplog.set_level(logging.WARNING, logger="engine.control.config_loader")
        text = "SOC_max,0.9\n# retuned\nSOC_max,0.92\n"
        assert parse_csv_config(text) == {"SOC_max": 0.92}
        assert "Line 3: duplicate configuration key 'SOC_max'" in caplog.text
        assert "first set on line 1" in caplog.text

    def test_quote_in_comment_does_not_swallow_lines(self):
        text = '# note: "hot" days,"see manual\nV_ref_upper,241\nSOC_max,0.95\n'
        assert parse_csv_config(text) == {"V_ref_upper": 241.0, "SOC_max": 0.95}

    def test_quoted_comment_in_full_file(self, tmp_path, config_values, controller_config):
        lines = ['# site "north","feeder 7']
        lines += [f"{key},{value}" for key, value in config_values.items()]
        path = tmp_path / "quoted.csv"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        assert load_config(path) == controller_config


# ======================================================================
# JSON format
# ======================================================================


class TestJsonFormat:

    def test_load(self, json_config_file, controller_config):
        assert load_config(json_config_file) == controller_config

    def test_missing_group(self, grouped_config):
        del grouped_config["power_limits"]
        with pytest.raises(ConfigError, match="Missing configuration group 'power_limits'"):
            parse_json_config(json.dumps(grouped_config))

    def test_missing_field_named(self, grouped_config):
        del grouped_config["pi_controller"]["Ki_lower"]
        with pytest.raises(ConfigError, match="pi_controller.Ki_lower"):
            parse_json_config(json.dumps(grouped_config))

    def test_group_not_object(self, grouped_config):
        grouped_config["voltage_settings"] = [241, 198]
        with pytest.raises(ConfigError, match="must be an object"):
            parse_json_config(json.dumps(grouped_config))

    def test_root_not_object(self):
        with pytest.raises(ConfigError, match="must be an object"):
            parse_json_config("[1, 2]")

    def test_invalid_syntax(self):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            parse_json_config("{not json")

    def test_unknown_keys_warned(self, grouped_config, caplog):
        caplog.set_level(logging.WARNING, logger="engine.control.config_loader")
        grouped_config["pi_controller"]["Kd_upper"] = 0.5
        grouped_config["metadata"] = {"site": "T1"}
        values = parse_json_config(json.dumps(grouped_config))
        assert "Kd_upper" not in values
        assert "pi_controller.Kd_upper" in caplog.text
        assert "'metadata'" in caplog.text

    def test_boolean_value_rejected(self, grouped_config):
        grouped_config["power_limits"]["SOC_max"] = True
        with pytest.raises(ConfigError, match="SOC_max must be numeric"):
            parse_json_config(json.dumps(grouped_config))

    def test_numeric_strings_accepted(self, grouped_config):
        grouped_config["voltage_settings"]["V_ref_upper"] = "241.0"
        assert parse_json_config(json.dumps(grouped_config))["V_ref_upper"] == 241.0

    def test_optional_transition_width(self, tmp_path, grouped_config):
        grouped_config["power_limits"]["SOC_transition_width"] = 0.1
        path = tmp_path / "wide.json"
        path.write_text(json.dumps(grouped_config))
        assert load_config(path).soc_transition_width == 0.1


# ======================================================================
# load_config dispatch and validation
# ======================================================================


class TestLoadConfig:

    def test_formats_registry(self):
        assert sorted(FORMATS) == [".csv", ".json"]

    def test_extension_case_insensitive(self, tmp_path, grouped_config):
        path = tmp_path / "CONFIG.JSON"
        path.write_text(json.dumps(grouped_config))
        assert load_config(path).v_ref_lower == 198.0

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("V_ref_upper: 241")
        with pytest.raises(ConfigError, match="Unsupported configuration format"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read configuration file"):
            load_config(tmp_path / "absent.json")

    def test_invariant_violation_becomes_config_error(self, config_values):
        with pytest.raises(ConfigError, match="Invalid configuration.*V_ref_lower"):
            build_config({**config_values, "V_ref_lower": 260.0})

    def test_field_constraint_named(self, config_values):
        with pytest.raises(ConfigError, match="Deadband_lower"):
            build_config({**config_values, "Deadband_lower": -2.0})

    def test_loaded_values_logged(self, json_config_file, caplog):
        caplog.set_level(logging.INFO, logger="engine.control.config_loader")
        load_config(json_config_file)
        assert "V_ref_upper=241" in caplog.text
        assert "SOC_min=0.15" in caplog.text

    def test_shipped_example_files_agree(self):
        from pathlib import Path

        backend = Path(__file__).resolve().parents[2]
        assert load_config(backend / "config.json") == load_config(backend / "config.csv")
