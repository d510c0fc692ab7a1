"""Tests for service configuration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from book_lending.config import DEFAULT_JWT_SECRET, ServiceConfig, get_config, reset_config


class TestServiceConfig:
    """Test configuration loading and validation."""

    def test_default_configuration(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ServiceConfig()

        assert config.service_name == "book-lending"
        assert config.service_version == "0.1.0"
        assert config.database_path == (tmp_path / "data" / "lending.db").absolute()
        assert config.jwt_algorithm == "HS256"
        assert config.token_ttl_minutes == 60
        assert config.store_conflict_retries == 1
        assert config.uses_default_secret is True

    def test_environment_variable_loading(self, clean_env, tmp_path):
        env_vars = {
            "BOOK_LENDING_SERVICE_NAME": "lending-test",
            "BOOK_LENDING_DATABASE_PATH": str(tmp_path / "env.db"),
            "BOOK_LENDING_JWT_SECRET": "from-the-environment",
            "BOOK_LENDING_TOKEN_TTL_MINUTES": "15",
            "BOOK_LENDING_LOG_LEVEL": "debug",
        }

        with patch.dict(os.environ, env_vars):
            config = ServiceConfig()

        assert config.service_name == "lending-test"
        assert config.database_path == tmp_path / "env.db"
        assert config.jwt_secret == "from-the-environment"
        assert config.token_ttl_minutes == 15
        assert config.log_level == "DEBUG"
        assert config.is_development is True

    def test_secret_hidden_from_repr(self, test_config):
        assert test_config.jwt_secret not in repr(test_config)
        assert DEFAULT_JWT_SECRET not in repr(ServiceConfig(database_path=test_config.database_path))

    @pytest.mark.parametrize("name", ["Book_Lending", "book lending", "ab"])
    def test_invalid_service_names(self, name, test_db_path):
        with pytest.raises(ValidationError):
            ServiceConfig(service_name=name, database_path=test_db_path)

    def test_only_hmac_algorithms_allowed(self, test_db_path):
        with pytest.raises(ValidationError):
            ServiceConfig(jwt_algorithm="none", database_path=test_db_path)
        with pytest.raises(ValidationError):
            ServiceConfig(jwt_algorithm="RS256", database_path=test_db_path)

    def test_limits_validated(self, test_db_path):
        with pytest.raises(ValidationError):
            ServiceConfig(token_ttl_minutes=0, database_path=test_db_path)
        with pytest.raises(ValidationError):
            ServiceConfig(request_timeout_seconds=0, database_path=test_db_path)
        with pytest.raises(ValidationError):
            ServiceConfig(store_conflict_retries=6, database_path=test_db_path)

    def test_database_directory_created(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "lending.db"
        config = ServiceConfig(database_path=db_path)

        assert db_path.parent.is_dir()
        assert config.get_database_url() == f"sqlite:///{db_path}"


class TestConfigSingleton:
    def test_get_config_is_cached_until_reset(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        reset_config()

        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first
        reset_config()

    def test_database_path_is_absolute(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ServiceConfig(database_path=Path("relative.db"))
        assert config.database_path.is_absolute()
