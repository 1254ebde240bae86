"""
Unit tests for the query file parser.

Tests the YAML parsing, validation, and error handling functionality of the
ConfigParser class.
"""

import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from filequery.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    create_config_template,
    load_config,
    validate_config_file,
)
from filequery.models.find_options import FindOptions, Ignore
from filequery.models.query_config import QueryConfig
from filequery.models.search_criteria import Filesize


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write(self, data, name="query.yaml") -> Path:
        path = self.root / name
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.safe_dump(data, f)
        return path

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.filequery.yaml',
            '.filequery.yml',
            'filequery.yaml',
            'filequery.yml',
        ]

    def test_load_config_with_valid_file(self):
        """Test loading a query from a valid YAML file."""
        path = self._write({
            'roots': [self.temp_dir],
            'conditions': [{'all_of': ['filesize_over="100"']}],
            'max_num_results': 10,
            'ignore': 'folders',
        })

        result = ConfigParser().load_config(path)

        assert isinstance(result, ConfigParseResult)
        assert isinstance(result.config, QueryConfig)
        assert isinstance(result.options, FindOptions)
        assert result.config_path == path
        assert result.is_default is False
        assert result.warnings == []
        assert result.options.max_num_results == 10
        assert result.options.ignore is Ignore.FOLDERS
        assert result.options.options[0].leaves() == [Filesize.over(100)]

    def test_load_config_file_not_found(self):
        """Test loading a query from a non-existent file."""
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigParser().load_config(self.root / "missing.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading a query with invalid YAML syntax."""
        path = self._write("roots: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            ConfigParser().load_config(path)

    def test_load_config_not_a_mapping(self):
        """Test loading a YAML file whose top level is a list."""
        path = self._write("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must contain a YAML object"):
            ConfigParser().load_config(path)

    def test_load_config_invalid_criteria(self):
        """Test that a malformed criteria string fails validation."""
        path = self._write({'roots': ['.'], 'conditions': [{'any_of': ['filesize_over=100']}]})
        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            ConfigParser().load_config(path)

    def test_load_config_invalid_depth_range(self):
        """Test that min_depth_from_start above max_search_depth is rejected."""
        path = self._write({'roots': ['.'], 'min_depth_from_start': 3, 'max_search_depth': 1})
        with pytest.raises(ConfigurationError, match="min_depth_from_start"):
            ConfigParser().load_config(path)

    def test_empty_file_uses_default_roots(self):
        """Test that an empty query file falls back to the default roots."""
        path = self._write("")
        result = ConfigParser().load_config(path)
        assert result.config.roots == [str(Path.cwd())]
        assert result.is_default is False

    def test_missing_roots_keep_other_settings(self):
        """Test that settings are kept when roots are filled from the defaults."""
        path = self._write({'max_search_depth': 2})
        result = ConfigParser().load_config(path)
        assert result.config.roots == [str(Path.cwd())]
        assert result.options.max_search_depth == 2

    def test_default_config(self):
        """Test loading when no query file can be found."""
        parser = ConfigParser()
        with patch.object(parser, '_find_and_load_config', return_value=(None, None)):
            result = parser.load_config()

        assert result.is_default is True
        assert result.config_path is None
        assert result.warnings[0] == "No configuration file found, using default settings"
        assert result.options.options == []

    def test_finds_config_in_working_directory(self, monkeypatch):
        """Test discovery of a query file in the current directory."""
        self._write({'roots': [self.temp_dir], 'max_num_results': 3}, name='.filequery.yaml')
        monkeypatch.chdir(self.root)

        result = ConfigParser().load_config()

        assert result.is_default is False
        assert result.config_path == self.root / '.filequery.yaml'
        assert result.options.max_num_results == 3

    def test_strict_mode_raises_on_warnings(self):
        """Test that strict mode turns warnings into errors."""
        path = self._write({'roots': [self.temp_dir]})
        with pytest.raises(ConfigurationError, match="strict mode"):
            ConfigParser(strict_mode=True).load_config(path)

    def test_strict_mode_without_warnings(self):
        """Test that strict mode accepts a query without warnings."""
        path = self._write({'roots': [self.temp_dir], 'conditions': [{'none_of': 'filename_contains="tmp"'}]})
        result = ConfigParser(strict_mode=True).load_config(path)
        assert result.warnings == []

    def test_save_config_round_trip(self):
        """Test that a saved query loads back unchanged."""
        config = QueryConfig(
            roots=[self.temp_dir],
            conditions=[{'all_of': ['filesize_over="1"'], 'none_of': ['filename_contains="draft"']}],
            max_search_depth=4,
            ignore='files',
        )
        path = self.root / "nested" / "saved.yaml"

        ConfigParser().save_config(config, path)
        loaded = ConfigParser().load_config(path).config

        assert loaded == config
        assert path.read_text(encoding='utf-8').startswith("# filequery query file")

    def test_validate_config_file(self):
        """Test validation without running the query."""
        parser = ConfigParser()
        valid = self._write({'roots': ['.']}, name="valid.yaml")
        invalid = self._write({'roots': ['.'], 'ignore': 'links'}, name="invalid.yaml")

        assert parser.validate_config_file(valid) == []
        assert len(parser.validate_config_file(invalid)) == 1
        assert parser.validate_config_file(self.root / "missing.yaml") == [
            f"Configuration file not found: {self.root / 'missing.yaml'}"
        ]

    def test_get_config_template_is_valid(self):
        """Test that the template parses into a valid query."""
        template = ConfigParser().get_config_template()
        data = yaml.safe_load(template)

        config = QueryConfig.from_dict(data)

        assert len(config.conditions) == 3
        assert config.ignore is Ignore.FOLDERS
        assert "# Root paths, searched in order" in template


class TestConvenienceFunctions:
    """Test cases for the module-level helpers."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "query.yml"
        path.write_text(f"roots:\n  - {tmp_path}\nfollow_symlinks: true\nmax_search_depth: 1\n")

        result = load_config(path)

        assert result.options.follow_symlinks is True
        assert result.config.roots == [str(tmp_path)]

    def test_validate_config_file(self, tmp_path):
        path = tmp_path / "query.yml"
        path.write_text("roots: 5\n")
        errors = validate_config_file(path)
        assert len(errors) == 1
        assert errors[0].startswith("Configuration validation failed")

    def test_create_config_template(self, tmp_path):
        path = tmp_path / "sub" / "template.yaml"
        create_config_template(path)
        assert validate_config_file(path) == []
