import tempfile

import pytest
import yaml

from fragmentbridge import constants
from fragmentbridge.config import BridgeConfig, load_config
from fragmentbridge.utils import BridgeException


def write_config(data):
    _, file_path = tempfile.mkstemp()
    with open(file_path, "w") as f:
        f.write(yaml.safe_dump(data))
    return file_path


def test_defaults_without_file(tmp_path):
    config = load_config(path=str(tmp_path / "missing"), environ={})
    assert config == BridgeConfig()
    assert config.port == constants.DEFAULT_PORT
    assert config.host == '127.0.0.1'
    assert config.timeout == 300


def test_file_values():
    path = write_config({"port": 8085, "timeout": 60, "locale": "vi", "unknown": True})
    config = load_config(path=path, environ={})
    assert config.port == 8085
    assert config.timeout == 60
    assert config.locale == "vi"


def test_empty_file():
    _, file_path = tempfile.mkstemp()
    assert load_config(path=file_path, environ={}) == BridgeConfig()


def test_environment_overrides_file():
    path = write_config({"port": 8085, "locale": "vi"})
    config = load_config(path=path, environ={"FB_PORT": "9000", "FB_TIMEOUT": "2.5", "FB_LOCALE": ""})
    assert config.port == 9000
    assert config.timeout == 2.5
    assert config.locale == "vi"


def test_config_file_env_var():
    path = write_config({"port": 4000})
    assert load_config(environ={"FB_CONFIG_FILE": path}).port == 4000


def test_default_path_used(monkeypatch):
    path = write_config({"timeout": 42})
    monkeypatch.setattr(constants, "CONFIG_FILE_PATH", path)
    assert load_config(environ={}).timeout == 42


@pytest.mark.parametrize("environ", [
    {"FB_PORT": "abc"},
    {"FB_PORT": "70000"},
    {"FB_TIMEOUT": "0"},
    {"FB_HOST": "0.0.0.0"},
    {"FB_HOST": "192.168.1.10"},
    {"FB_HOST": "localhost"},
])
def test_invalid_values(tmp_path, environ):
    with pytest.raises(BridgeException):
        load_config(path=str(tmp_path / "missing"), environ=environ)


def test_non_mapping_file():
    path = write_config(["a", "b"])
    with pytest.raises(BridgeException) as exc_info:
        load_config(path=path, environ={})
    assert "expected a mapping" in str(exc_info.value)


def test_with_overrides():
    config = BridgeConfig().with_overrides(port=None, timeout=5, locale="vi")
    assert config.port == constants.DEFAULT_PORT
    assert config.timeout == 5
    assert config.locale == "vi"

    with pytest.raises(BridgeException):
        BridgeConfig().with_overrides(host="10.0.0.1")


def test_other_ipv4_loopback_allowed():
    assert BridgeConfig().with_overrides(host="127.0.0.2").host == "127.0.0.2"


def test_ipv6_loopback_rejected():
    with pytest.raises(BridgeException):
        BridgeConfig().with_overrides(host="::1")
