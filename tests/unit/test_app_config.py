"""Unit tests for the app_config module."""
import json
import os
from unittest.mock import patch, MagicMock

import pytest
import yaml

from translation_sync.app_config import (
    ConfigError,
    Credentials,
    SyncConfig,
    build_sync_config,
    load_app_config,
    load_credentials,
)


class TestSyncConfig:
    """Test cases for the SyncConfig dataclass."""

    def test_defaults(self):
        config = SyncConfig()

        assert config.credentials == Credentials(user='api', password='')
        assert config.out_directory == 'dist'
        assert config.resource_ids == ['presets']
        assert config.reviewed_only is False
        assert config.source_locale == 'en'
        assert config.dispatch_interval == 0.2

    def test_translations_directory(self):
        config = SyncConfig(out_directory='build')

        assert config.translations_directory == os.path.join('build', 'translations')


class TestLoadCredentials:
    """Test cases for credential resolution."""

    def test_auth_file_is_used(self, tmp_path):
        (tmp_path / 'transifex.auth').write_text(json.dumps({'user': 'alice', 'password': 'token'}))

        with patch.dict(os.environ, {'TRANSIFEX_USER': 'bob'}, clear=True):
            credentials = load_credentials(str(tmp_path))

        assert credentials == Credentials(user='alice', password='token')

    def test_environment_is_used_without_auth_file(self, tmp_path):
        with patch.dict(os.environ, {'TRANSIFEX_USER': 'bob', 'TRANSIFEX_PASSWORD': 'pw'}, clear=True):
            credentials = load_credentials(str(tmp_path))

        assert credentials == Credentials(user='bob', password='pw')

    def test_defaults_without_auth_file_or_environment(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            credentials = load_credentials(str(tmp_path))

        assert credentials == Credentials(user='api', password='')

    def test_malformed_auth_file_raises(self, tmp_path):
        (tmp_path / 'transifex.auth').write_text('{"user": "alice",')

        with pytest.raises(ConfigError, match='not valid JSON'):
            load_credentials(str(tmp_path))

    def test_incomplete_auth_file_raises(self, tmp_path):
        (tmp_path / 'transifex.auth').write_text(json.dumps({'user': 'alice'}))

        with pytest.raises(ConfigError, match='invalid'):
            load_credentials(str(tmp_path))


class TestBuildSyncConfig:
    """Test cases for building the configuration from an options mapping."""

    def test_options_override_defaults(self, tmp_path):
        options = {
            'credentials': {'user': 'alice', 'password': 'token'},
            'out_directory': 'build',
            'organization_id': 'openstreetmap',
            'project_id': 'id-editor',
            'resource_ids': ['core', 'presets'],
            'reviewed_only': ['vi', 'pt-BR'],
            'source_locale': 'en-US',
            'api_root': 'https://example.test/api/2/',
        }

        config = build_sync_config(options, str(tmp_path))

        assert config.credentials == Credentials(user='alice', password='token')
        assert config.out_directory == 'build'
        assert config.organization_id == 'openstreetmap'
        assert config.project_id == 'id-editor'
        assert config.resource_ids == ['core', 'presets']
        assert config.reviewed_only == ['vi', 'pt-BR']
        assert config.source_locale == 'en-US'
        assert config.api_root == 'https://example.test/api/2'

    def test_credentials_loaded_when_not_inline(self, tmp_path):
        (tmp_path / 'transifex.auth').write_text(json.dumps({'user': 'alice', 'password': 'token'}))

        config = build_sync_config({'project_id': 'id-editor'}, str(tmp_path))

        assert config.credentials.user == 'alice'

    def test_logging_section_is_accepted(self, tmp_path):
        config = build_sync_config({'credentials': {'user': 'a', 'password': 'b'}, 'logging': {'log_level': 'DEBUG'}},
                                   str(tmp_path))

        assert config.project_id == ''

    def test_extra_inline_credential_keys_are_ignored(self, tmp_path):
        options = {'credentials': {'user': 'u', 'password': 'p', 'token': 'x'}}

        config = build_sync_config(options, str(tmp_path))

        assert config.credentials == Credentials(user='u', password='p')

    @pytest.mark.parametrize('options', [
        {'reviewed_only': 'yes'},
        {'reviewed_only': [1, 2]},
        {'resource_ids': 'presets'},
        {'credentials': {'user': 'alice'}},
        {'dispatch_interval': 0},
        {'source_locale': ''},
    ])
    def test_invalid_options_raise(self, options, tmp_path):
        with pytest.raises(ConfigError):
            build_sync_config(options, str(tmp_path))


class TestLoadAppConfig:
    """Test cases for the load_app_config function."""

    def test_load_config_from_yaml_file(self, tmp_path):
        config_path = tmp_path / 'sync.yaml'
        config_path.write_text(yaml.dump({
            'project_id': 'id-editor',
            'organization_id': 'openstreetmap',
            'resource_ids': ['core'],
            'reviewed_only': True,
            'logging': {'log_level': 'DEBUG', 'log_file_path': ''},
        }))

        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch('translation_sync.app_config.setup_logger') as mock_logger:
                mock_logger.return_value = MagicMock()
                with patch.dict(os.environ, {'TRANSLATION_SYNC_CONFIG_FILE': str(config_path)}, clear=True):
                    config = load_app_config()

        assert config.project_id == 'id-editor'
        assert config.resource_ids == ['core']
        assert config.reviewed_only is True
        mock_logger.assert_called_once_with('DEBUG', '', True)

    def test_empty_logging_section_uses_default_logging(self, tmp_path):
        (tmp_path / 'config.yaml').write_text('project_id: id-editor\nlogging:\n')

        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch('translation_sync.app_config.setup_logger') as mock_logger:
                mock_logger.return_value = MagicMock()
                with patch.dict(os.environ, {}, clear=True):
                    config = load_app_config()

        assert config.project_id == 'id-editor'
        mock_logger.assert_called_once_with('INFO', 'logs/translation_sync.log', True)

    def test_missing_file_uses_defaults(self, tmp_path):
        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch('translation_sync.app_config.setup_logger') as mock_logger:
                mock_logger.return_value = MagicMock()
                with patch.dict(os.environ, {}, clear=True):
                    config = load_app_config()

        assert config.resource_ids == ['presets']
        assert config.out_directory == 'dist'

    def test_dotenv_credentials(self, tmp_path):
        (tmp_path / '.env').write_text('TRANSIFEX_USER=carol\nTRANSIFEX_PASSWORD=from-dotenv\n')

        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch('translation_sync.app_config.setup_logger') as mock_logger:
                mock_logger.return_value = MagicMock()
                with patch.dict(os.environ, {}, clear=True):
                    config = load_app_config()

        assert config.credentials == Credentials(user='carol', password='from-dotenv')

    def test_invalid_yaml_raises(self, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text('project_id: [unclosed')

        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch.dict(os.environ, {}, clear=True):
                with pytest.raises(ConfigError, match='Invalid YAML'):
                    load_app_config()

    def test_non_mapping_yaml_raises(self, tmp_path):
        (tmp_path / 'config.yaml').write_text('- just\n- a list\n')

        with patch('translation_sync.app_config.os.getcwd', return_value=str(tmp_path)):
            with patch.dict(os.environ, {}, clear=True):
                with pytest.raises(ConfigError, match='YAML dictionary'):
                    load_app_config()
