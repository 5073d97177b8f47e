"""Tests for config loading."""

import pytest

from pdojo.config import CONFIG_PATH, DEFAULTS, load_config


class TestLoadConfig:
    def test_bundled_config_has_every_default_key(self):
        config = load_config(CONFIG_PATH)
        assert set(DEFAULTS) <= set(config)
        assert config["pattern_source"] in ("static", "llm")
        assert config["evaluator"] in ("heuristic", "llm")

    def test_file_values_override_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("evaluator: llm\njudge_model: claude-test\n", encoding="utf-8")
        config = load_config(path)
        assert config["evaluator"] == "llm"
        assert config["judge_model"] == "claude-test"
        assert config["pattern_source"] == "static"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DEFAULTS

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- evaluator\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)
