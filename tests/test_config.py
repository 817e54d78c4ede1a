"""
tests/test_config.py

Tests for planner configuration (goap_config.py).

Tests cover:
- PlannerSettings defaults and validation
- Loading the 'planner' section from YAML
- Process-wide get_config()/set_config()
"""

import pytest
import yaml

from goap_config import PlannerSettings, get_config, load_settings, set_config
from goap_exceptions import InvalidConfigError


@pytest.fixture
def restore_config():
    yield
    set_config(None)


@pytest.fixture
def write_config(tmp_path):
    def _write(content: str):
        path = tmp_path / "planner.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


class TestPlannerSettings:
    def test_defaults(self):
        settings = PlannerSettings()
        assert settings.to_dict() == {
            "heuristic": "binary",
            "match_policy": "lenient_any",
            "max_expansions": None,
            "log_events": True,
        }

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"heuristic": "manhattan"},
            {"match_policy": "all"},
            {"max_expansions": -1},
            {"max_expansions": "lots"},
            {"max_expansions": 2.5},
            {"max_expansions": True},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            PlannerSettings(**kwargs)

    def test_from_dict(self):
        settings = PlannerSettings.from_dict({"heuristic": "difference", "max_expansions": 50})
        assert settings.heuristic == "difference"
        assert settings.max_expansions == 50
        assert settings.match_policy == "lenient_any"

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            PlannerSettings.from_dict({"heuristics": "binary"})
        assert exc_info.value.context["unknown"] == ["heuristics"]


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "absent.yaml") == PlannerSettings()

    def test_planner_section(self, write_config):
        path = write_config(
            "planner:\n"
            "  heuristic: difference\n"
            "  match_policy: strict_all\n"
            "  max_expansions: 100\n"
            "  log_events: false\n"
        )
        settings = load_settings(path)
        assert settings == PlannerSettings(
            heuristic="difference",
            match_policy="strict_all",
            max_expansions=100,
            log_events=False,
        )

    def test_empty_file_gives_defaults(self, write_config):
        assert load_settings(write_config("")) == PlannerSettings()

    def test_other_sections_ignored(self, write_config):
        path = write_config("logging:\n  level: DEBUG\n")
        assert load_settings(path) == PlannerSettings()

    def test_malformed_yaml(self, write_config):
        with pytest.raises(InvalidConfigError) as exc_info:
            load_settings(write_config("planner: [unclosed\n"))
        assert isinstance(exc_info.value.original_exception, yaml.YAMLError)

    def test_document_must_be_mapping(self, write_config):
        with pytest.raises(InvalidConfigError):
            load_settings(write_config("- a\n- b\n"))

    def test_section_must_be_mapping(self, write_config):
        with pytest.raises(InvalidConfigError):
            load_settings(write_config("planner: 3\n"))

    def test_invalid_value_in_file(self, write_config):
        with pytest.raises(InvalidConfigError):
            load_settings(write_config("planner:\n  heuristic: manhattan\n"))

    def test_non_numeric_expansion_limit_in_file(self, write_config):
        with pytest.raises(InvalidConfigError) as exc_info:
            load_settings(write_config("planner:\n  max_expansions: lots\n"))
        assert exc_info.value.context["max_expansions"] == "lots"


class TestGlobalConfig:
    def test_default_instance_is_shared(self, restore_config):
        set_config(None)
        assert get_config() is get_config()
        assert get_config() == PlannerSettings()

    def test_set_config(self, restore_config):
        custom = PlannerSettings(max_expansions=3)
        set_config(custom)
        assert get_config() is custom
