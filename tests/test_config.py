"""Tests for viewer configuration."""

import pytest

from jfold._format import FormatOptions, IndentConfig
from jfold._highlight import SearchScope
from jfold.config import BehaviorConfig, ConfigError, DisplayConfig, ViewerConfig


class TestDefaults:
    def test_defaults(self):
        config = ViewerConfig()
        assert config.display == DisplayConfig()
        assert config.display.indent == 2
        assert config.display.style == "json"
        assert config.behavior.expand_depth is None
        assert config.behavior.scope is SearchScope.ALL

    def test_empty_mapping(self):
        assert ViewerConfig.from_mapping(None) == ViewerConfig()
        assert ViewerConfig.from_mapping({}) == ViewerConfig()

    def test_derived_format_settings(self):
        display = DisplayConfig(indent=4, use_tabs=True, max_value_length=20)
        assert display.indent_config == IndentConfig(4, True)
        assert display.format_options == FormatOptions(max_value_length=20)


class TestFromMapping:
    def test_partial_override(self):
        config = ViewerConfig.from_mapping(
            {"display": {"indent": 4, "style": "tree"}, "behavior": {"expand_depth": 1}}
        )
        assert config.display.indent == 4
        assert config.display.style == "tree"
        assert config.display.use_tabs is False
        assert config.behavior.expand_depth == 1
        assert config.behavior.page_size == 0

    def test_unknown_keys_ignored(self):
        config = ViewerConfig.from_mapping(
            {"display": {"colour": "red"}, "other": {"x": 1}}
        )
        assert config == ViewerConfig()

    def test_null_depth(self):
        config = ViewerConfig.from_mapping({"behavior": {"expand_depth": None}})
        assert config.behavior.expand_depth is None

    def test_scope(self):
        config = ViewerConfig.from_mapping({"behavior": {"search_scope": "keys"}})
        assert config.behavior.scope is SearchScope.KEYS

    @pytest.mark.parametrize(
        "data",
        [
            {"display": {"indent": "2"}},
            {"display": {"indent": True}},
            {"display": {"use_tabs": 1}},
            {"display": {"style": 3}},
            {"behavior": {"expand_depth": "all"}},
            {"display": "wide"},
        ],
    )
    def test_type_errors(self, data):
        with pytest.raises(ConfigError):
            ViewerConfig.from_mapping(data)

    @pytest.mark.parametrize(
        "data",
        [
            {"display": {"style": "yaml"}},
            {"display": {"indent": -1}},
            {"display": {"max_value_length": -5}},
            {"behavior": {"expand_depth": -1}},
            {"behavior": {"search_scope": "everything"}},
        ],
    )
    def test_range_errors(self, data):
        with pytest.raises(ConfigError):
            ViewerConfig.from_mapping(data)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)

    def test_validate_direct(self):
        config = ViewerConfig(behavior=BehaviorConfig(search_scope="bogus"))
        with pytest.raises(ConfigError, match="search_scope"):
            config.validate()
