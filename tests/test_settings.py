import logging

import pytest
from unittest.mock import patch, MagicMock

from mule_diagram.settings import (
    DEFAULT_SETTINGS,
    DiagramSettings,
    load_settings,
    settings_from_dict,
)


@pytest.fixture
def mock_logger():
    with patch('mule_diagram.settings.logger', MagicMock()) as mock_log:
        yield mock_log


def test_defaults():
    assert DEFAULT_SETTINGS == DiagramSettings(
        size_score_threshold=5000,
        max_nodes_for_detailed=30,
        detailed_component_limit=10,
        max_label_length=40,
        direction="TD",
    )


def test_load_settings_without_path_returns_defaults():
    assert load_settings(None) is DEFAULT_SETTINGS


def test_load_settings_from_yaml(tmp_path, mock_logger):
    config = tmp_path / "diagram.yaml"
    config.write_text("detailed_component_limit: 5\ndirection: lr\n", encoding="utf-8")

    settings = load_settings(str(config))

    assert settings.detailed_component_limit == 5
    assert settings.direction == "LR"
    assert settings.size_score_threshold == 5000
    mock_logger.info.assert_called_once()


def test_missing_file_logs_and_returns_defaults(tmp_path, mock_logger):
    assert load_settings(str(tmp_path / "missing.yaml")) is DEFAULT_SETTINGS
    mock_logger.error.assert_called_once()


def test_invalid_yaml_logs_and_returns_defaults(tmp_path, mock_logger):
    config = tmp_path / "bad.yaml"
    config.write_text("direction: [LR\n", encoding="utf-8")

    assert load_settings(str(config)) is DEFAULT_SETTINGS
    assert "Error parsing settings file" in mock_logger.error.call_args[0][0]


@pytest.mark.parametrize("content", ["", "# only a comment\n"])
def test_empty_document_returns_defaults(tmp_path, content):
    config = tmp_path / "empty.yaml"
    config.write_text(content, encoding="utf-8")
    assert load_settings(str(config)) is DEFAULT_SETTINGS


def test_non_mapping_document_returns_defaults(tmp_path, mock_logger):
    config = tmp_path / "list.yaml"
    config.write_text("- 1\n- 2\n", encoding="utf-8")

    assert load_settings(str(config)) is DEFAULT_SETTINGS
    mock_logger.error.assert_called_once()


def test_invalid_value_in_file_raises(tmp_path, mock_logger):
    config = tmp_path / "invalid.yaml"
    config.write_text("max_label_length: 0\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(str(config))


def test_unknown_keys_are_ignored_with_warning(mock_logger):
    settings = settings_from_dict({"colour": "blue", "max_label_length": 60})

    assert settings.max_label_length == 60
    mock_logger.warning.assert_called_once_with("Ignoring unknown diagram setting: colour")


@pytest.mark.parametrize("data", [
    {"direction": "sideways"},
    {"size_score_threshold": "5000"},
    {"max_nodes_for_detailed": True},
    {"detailed_component_limit": -1},
    {"max_label_length": 2.5},
])
def test_invalid_values_raise(data):
    with pytest.raises(ValueError):
        settings_from_dict(data)


def test_overrides_apply_on_base():
    base = DiagramSettings(direction="LR")
    settings = settings_from_dict({"max_nodes_for_detailed": 5}, base)
    assert settings.direction == "LR"
    assert settings.max_nodes_for_detailed == 5
    assert settings_from_dict(None, base) is base


def test_unknown_key_warning_reaches_log(caplog):
    with caplog.at_level(logging.WARNING, logger='mule_diagram.settings'):
        settings_from_dict({"colour": "blue"})
    assert "Ignoring unknown diagram setting: colour" in caplog.text
