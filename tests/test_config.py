import pytest

from sftp_loader.config import (
    APIConfig,
    AppConfig,
    ConfigError,
    LoaderConfig,
    load_config,
    load_config_from_dict,
)

CONFIG_YAML = """
sftp:
  host: sftp.example.com
  username: hr_sync
  password_env: HR_SFTP_PASSWORD
  remote_path: /exports/hr
pool:
  max_connections: 3
loader:
  case_insensitive_match: false
"""


def test_defaults():
    config = load_config_from_dict({'sftp': {'host': 'h', 'username': 'u'}})

    assert isinstance(config, AppConfig)
    assert config.sftp.port == 22
    assert config.sftp.remote_path is None
    assert config.pool.max_connections == 4
    assert config.pool.max_idle == 4
    assert config.api.api_key is None
    assert config.api.api_key_env == 'API_KEY'
    assert config.loader == LoaderConfig(case_insensitive_match=True, encoding='utf-8', remote_dir='.')


def test_load_from_file(tmp_path, monkeypatch):
    path = tmp_path / 'loader.yaml'
    path.write_text(CONFIG_YAML)
    monkeypatch.setenv('HR_SFTP_PASSWORD', 'hunter2')

    config = load_config(str(path))
    assert config.sftp.remote_path == '/exports/hr'
    assert config.sftp.resolve_password() == 'hunter2'
    assert config.pool.max_connections == 3
    assert not config.loader.case_insensitive_match


def test_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / 'other.yaml'
    path.write_text(CONFIG_YAML)
    monkeypatch.setenv('SFTP_LOADER_CONFIG', str(path))

    assert load_config().sftp.host == 'sftp.example.com'


def test_explicit_password_wins(monkeypatch):
    monkeypatch.setenv('PW', 'env')
    config = load_config_from_dict({'sftp': {'host': 'h', 'username': 'u', 'password': 'plain', 'password_env': 'PW'}})
    assert config.sftp.resolve_password() == 'plain'


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match='not found'):
        load_config(str(tmp_path / 'missing.yaml'))


@pytest.mark.parametrize('content, message', [
    ('', 'Empty configuration'),
    ('- a\n- b\n', 'Expected a YAML mapping'),
    ('sftp: [unclosed', 'Failed to parse YAML'),
    ('sftp:\n  host: h\n', 'sftp -> username'),
])
def test_invalid_file(tmp_path, content, message):
    path = tmp_path / 'bad.yaml'
    path.write_text(content)
    with pytest.raises(ConfigError, match=message):
        load_config(str(path))


@pytest.mark.parametrize('section', [
    {'pool': {'max_connections': 0}},
    {'pool': {'max_connections': 4, 'max_idle': 2}},
    {'pool': {'max_idle': 0}},
    {'loader': {'encoding': 'no-such-codec'}},
])
def test_invalid_values(section):
    with pytest.raises(ConfigError):
        load_config_from_dict({'sftp': {'host': 'h', 'username': 'u'}, **section})


def test_api_key_resolution(monkeypatch):
    monkeypatch.setenv('API_KEY', 'from-env')
    monkeypatch.setenv('LOADER_KEY', 'custom-env')

    assert APIConfig().resolve_api_key() == 'from-env'
    assert APIConfig(api_key_env='LOADER_KEY').resolve_api_key() == 'custom-env'
    assert APIConfig(api_key='plain', api_key_env='LOADER_KEY').resolve_api_key() == 'plain'
    assert APIConfig(api_key_env=None).resolve_api_key() is None
