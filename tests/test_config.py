import pytest

from configmanager.common.config import (
    ENV_CONFIG_PATH,
    ENV_CONNECTION_STRING,
    ConfigFilter,
    SentinelConfigKey,
    find_config_path,
    load_config_file,
    load_manager_config,
)
from configmanager.common.exceptions import ConfigFileError

FULL_CONFIG = {
    "manager": {
        "name": "web",
        "polling_interval_s": "15",
        "sentinel": {"key": "app:sentinel", "label": "prod"},
    },
    "filters": [
        {"key_filter": "app:*", "label_filter": "prod"},
        {"keyFilter": ".appconfig.featureflag/*"},
    ],
    "client": {"connection_string": "Endpoint=https://a.io;Id=i;Secret=cw==", "timeout_s": 5},
    "logging": {"level": "DEBUG", "json_format": False},
}


def test_load_manager_config_from_dict():
    config = load_manager_config(FULL_CONFIG, environ={})

    assert config.name == "web"
    assert config.polling_interval_s == 15.0
    assert config.sentinel == SentinelConfigKey("app:sentinel", "prod")
    assert config.filters == [
        ConfigFilter("app:*", "prod"),
        ConfigFilter(".appconfig.featureflag/*", None),
    ]
    assert config.client.timeout_s == 5.0
    assert config.client.has_credentials
    assert config.logging.level == "DEBUG"
    assert config.logging.json_format is False


def test_defaults_when_optional_sections_missing():
    config = load_manager_config({"manager": {"name": "bare"}}, environ={})

    assert config.filters == []
    assert config.polling_interval_s is None
    assert config.sentinel is None
    assert not config.client.has_credentials
    assert config.logging.level == "INFO"


def test_environment_overrides_connection_string():
    config = load_manager_config(FULL_CONFIG, environ={ENV_CONNECTION_STRING: "Endpoint=x;Id=y;Secret=z"})

    assert config.client.connection_string == "Endpoint=x;Id=y;Secret=z"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"manager": {"name": "x"}, "filters": [{"label_filter": "only"}]},
        {"manager": {"name": "x", "sentinel": {"label": "l"}}},
        {"manager": {"name": "x", "polling_interval_s": "soon"}},
    ],
)
def test_invalid_config_raises(data):
    with pytest.raises(ConfigFileError):
        load_manager_config(data, environ={})


def test_load_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "manager:\n"
        "  name: from-file\n"
        "  polling_interval_s: 30\n"
        "filters:\n"
        "  - key_filter: 'app:*'\n"
    )

    config = load_config_file(path, environ={})

    assert config.name == "from-file"
    assert config.polling_interval_s == 30.0
    assert config.filters == [ConfigFilter("app:*")]


def test_load_config_file_errors(tmp_path):
    with pytest.raises(ConfigFileError, match="not found"):
        load_config_file(tmp_path / "missing.yaml", environ={})

    broken = tmp_path / "broken.yaml"
    broken.write_text("manager: [unclosed\n")
    with pytest.raises(ConfigFileError, match="error parsing"):
        load_config_file(broken, environ={})

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string\n")
    with pytest.raises(ConfigFileError, match="mapping"):
        load_config_file(scalar, environ={})


def test_find_config_path_prefers_environment(tmp_path):
    target = str(tmp_path / "custom.yaml")

    assert find_config_path(environ={ENV_CONFIG_PATH: target}) == target
