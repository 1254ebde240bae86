"""
YAML query file parser for filequery.

This module loads, parses, and validates YAML query files. It handles query
file discovery, parsing, validation, and reports configuration problems with
helpful messages.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..models.find_options import FindOptions
from ..models.query_config import QueryConfig


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of a query file parsing operation.

    Attributes:
        config: The parsed and validated query
        options: FindOptions built from the query
        warnings: List of non-fatal warnings
        config_path: Path to the query file used
        is_default: Whether the default query was used
    """
    config: QueryConfig
    options: FindOptions
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when query file parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML query file parser with validation and error handling.

    This class loads YAML query files, validates their contents and converts
    them to QueryConfig and FindOptions objects. It supports query file
    discovery, a default query, and template generation.
    """

    DEFAULT_CONFIG_NAMES = [
        '.filequery.yaml',
        '.filequery.yml',
        'filequery.yaml',
        'filequery.yml'
    ]

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the query file parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse a query file or use the default query.

        Args:
            config_path: Path to the query file. If None, searches for default files.

        Returns:
            ConfigParseResult containing the parsed query and its FindOptions

        Raises:
            ConfigurationError: If the query is invalid or the file cannot be read
        """
        if config_path:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")

            config_data = self._load_yaml_file(config_path)
            is_default = False
        else:
            config_path, config_data = self._find_and_load_config()
            is_default = config_data is None

            if is_default:
                config_data = self._get_default_config()

        if not config_data.get('roots'):
            merged_config = self._get_default_config()
            merged_config.update({k: v for k, v in config_data.items() if k != 'roots'})
            config_data = merged_config

        config = self._validate_config_data(config_data)
        options = self._build_options(config)

        warnings = config.validate_configuration()
        if is_default:
            warnings.insert(0, "No configuration file found, using default settings")

        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        for warning in warnings:
            self.logger.warning(warning)

        self.logger.info(f"Configuration loaded successfully from {config_path or 'defaults'}")

        return ConfigParseResult(
            config=config,
            options=options,
            warnings=warnings,
            config_path=config_path,
            is_default=is_default
        )

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load a query file from the default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        search_paths = [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'filequery',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.exists() and config_file.is_file():
                    try:
                        config_data = self._load_yaml_file(config_file)
                        self.logger.info(f"Found configuration file: {config_file}")
                        return config_file, config_data
                    except ConfigurationError as e:
                        self.logger.warning(f"Failed to load {config_file}: {e}")
                        continue

        self.logger.info("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any]) -> QueryConfig:
        """
        Validate query data structure and values.

        Args:
            config_data: Raw query data from YAML

        Returns:
            Validated QueryConfig

        Raises:
            ConfigurationError: If the query is invalid
        """
        try:
            return QueryConfig.from_dict(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _build_options(self, config: QueryConfig) -> FindOptions:
        try:
            return config.to_find_options()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid find options: {e}") from e

    def _get_default_config(self) -> Dict[str, Any]:
        """
        Get the default query used when no file is found.

        Returns:
            Default query dictionary
        """
        return {
            'roots': [str(Path.cwd())],
            'conditions': [],
        }

    def save_config(self, config: QueryConfig, output_path: Union[str, Path]) -> None:
        """
        Save a query to a YAML file.

        Args:
            config: Query to save
            output_path: Path where to save the query

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(config.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with helpful comments.

        Args:
            config_dict: Query dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# filequery query file",
            "# Criteria use the syntax <name>=\"<value>\", e.g. filesize_over=\"1024\"",
            "",
        ]

        sections = [
            ("roots", "Root paths, searched in order"),
            ("conditions", "Criteria groups (all_of / any_of / none_of); every group has to hold"),
            ("max_num_results", "Maximum number of results (null for unlimited)"),
            ("max_search_depth", "Maximum folder depth (null for unlimited)"),
            ("min_depth_from_start", "Entries shallower than this are skipped"),
            ("ignore", "Ignore all 'files' or all 'folders' (null ignores nothing)"),
            ("ignore_hidden_files", "Skip entries whose name starts with a dot"),
            ("follow_symlinks", "Descend into symlinked folders"),
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.safe_dump({section_name: config_dict[section_name]},
                                              default_flow_style=False,
                                              sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a query file without running it.

        Args:
            config_path: Path to query file

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        config_path = Path(config_path)
        if not config_path.exists():
            errors.append(f"Configuration file not found: {config_path}")
            return errors

        try:
            config_data = self._load_yaml_file(config_path)
            config = self._validate_config_data(config_data)
            self._build_options(config)
        except ConfigurationError as e:
            errors.append(str(e))

        return errors

    def get_config_template(self) -> str:
        """
        Get a template query file with all options and comments.

        Returns:
            YAML template as string
        """
        template_config = {
            'roots': [
                '.',
                '~/Documents'
            ],
            'conditions': [
                {'all_of': ['filesize_over="100"', 'filesize_under="1000000"']},
                {'any_of': ['filenameregex="\\.(md|txt)$"', 'filename_contains="notes"']},
                {'none_of': ['filename_contains="draft"']},
            ],
            'max_num_results': 100,
            'max_search_depth': 5,
            'min_depth_from_start': 0,
            'ignore': 'folders',
            'ignore_hidden_files': True,
            'follow_symlinks': False
        }

        return self._generate_yaml_with_comments(template_config)


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load a query file.

    Args:
        config_path: Path to query file (optional)
        strict_mode: Whether to treat warnings as errors

    Returns:
        ConfigParseResult containing the parsed query

    Raises:
        ConfigurationError: If the query is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """
    Convenience function to validate a query file.

    Args:
        config_path: Path to query file

    Returns:
        List of validation errors (empty if valid)
    """
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template query file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
