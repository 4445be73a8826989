"""Tests for user configuration file management."""

import pytest
import yaml

from bucket_mirror.config_manager import get_config_path, load_config, save_config


class TestConfigPath:
    """Tests for config file path resolution."""

    def test_get_config_path_default(self):
        """Test that config path is in user home directory."""
        config_path = get_config_path()
        assert config_path.name == "config.yaml"
        assert config_path.parent.name == ".bucket-mirror"


class TestLoadConfig:
    """Tests for loading configuration."""

    def test_load_config_file_exists(self, tmp_path):
        """Test loading a valid config file."""
        config_file = tmp_path / "config.yaml"
        config_data = {"bucket": "photos", "local_root": "/data/photos"}

        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        loaded_config = load_config(config_file)
        assert loaded_config == config_data

    def test_load_config_file_missing(self, tmp_path):
        """Test loading when config file doesn't exist."""
        assert load_config(tmp_path / "nonexistent.yaml") is None

    def test_load_config_empty_file(self, tmp_path):
        """Test loading an empty config file."""
        config_file = tmp_path / "config.yaml"
        config_file.touch()

        assert load_config(config_file) is None

    def test_load_config_invalid_yaml(self, tmp_path):
        """Test loading a corrupted YAML file."""
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            f.write("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)


class TestSaveConfig:
    """Tests for saving configuration."""

    def test_save_config_creates_parent_directory(self, tmp_path):
        """Test that save_config creates parent directory if it doesn't exist."""
        config_file = tmp_path / ".bucket-mirror" / "config.yaml"
        config_data = {"bucket": "photos", "local_root": "/data/photos"}

        assert not config_file.parent.exists()

        save_config(config_file, config_data)

        assert config_file.exists()
        assert load_config(config_file) == config_data

    def test_save_config_overwrites_existing(self, tmp_path):
        """Test that save_config overwrites existing config file."""
        config_file = tmp_path / "config.yaml"

        save_config(config_file, {"bucket": "old-bucket", "profile": "old"})
        save_config(config_file, {"bucket": "new-bucket"})

        assert load_config(config_file) == {"bucket": "new-bucket"}

    def test_save_config_yaml_format(self, tmp_path):
        """Test that saved YAML is human-readable block style, in insertion order."""
        config_file = tmp_path / "config.yaml"

        save_config(config_file, {"bucket": "photos", "local_root": "/data/photos", "interval": 600.0})

        content = config_file.read_text()
        assert "{" not in content
        assert content.index("bucket:") < content.index("local_root:") < content.index("interval:")
