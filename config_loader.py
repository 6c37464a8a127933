"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml

from models import ExportLayout, ExportSettings, VisitPolicy


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        return cls._substitute_env_vars_recursive(config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        cls._validate_required_field(config, 'parseFilePath')
        # Unquoted YAML scalars like 2024-01-01 or 404 load as date/int
        if not isinstance(config['parseFilePath'], str):
            raise ValueError(
                f"parseFilePath must be a note name string, got {config['parseFilePath']!r}; "
                f"quote it in the config file"
            )

        cls._validate_required_field(config, 'mediaPath')
        if not isinstance(config['mediaPath'], str):
            raise ValueError("mediaPath must be a directory path string")

        files_paths = config.get('filesPaths')
        if not isinstance(files_paths, list) or not files_paths:
            raise ValueError("filesPaths must be a non-empty list of directories")
        for entry in files_paths:
            if not isinstance(entry, str) or not entry:
                raise ValueError(f"filesPaths entries must be non-empty strings, got: {entry!r}")

        black_list = config.get('blackList') or []
        if not isinstance(black_list, list):
            raise ValueError("blackList must be a list of note names")
        for entry in black_list:
            if not isinstance(entry, str):
                raise ValueError(
                    f"blackList entries must be note name strings, got {entry!r}; "
                    f"quote it in the config file"
                )

        # bool is an int subclass; True must not pass as a depth
        level = config.get('levelNesting')
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValueError("levelNesting must be an integer >= 1")

        export_settings = config.get('export') or {}
        if not isinstance(export_settings, dict):
            raise ValueError("export must be a mapping")

        for flag in ('keep_staging', 'progress_bars', 'dry_run'):
            value = get_nested(config, f'export.{flag}', False)
            if not isinstance(value, bool):
                raise ValueError(f"export.{flag} must be a boolean")

        policy = get_nested(config, 'export.visit_policy', VisitPolicy.FIRST_SEEN.value)
        try:
            VisitPolicy(policy)
        except ValueError:
            raise ValueError(
                f"export.visit_policy must be one of: {[p.value for p in VisitPolicy]}"
            )

        documents_dir = get_nested(config, 'export.documents_directory', 'notes')
        media_dir = get_nested(config, 'export.media_directory', 'media')
        if not isinstance(documents_dir, str) or not isinstance(media_dir, str):
            raise ValueError("export.documents_directory and export.media_directory must be strings")
        if not documents_dir or not media_dir:
            raise ValueError("export.documents_directory and export.media_directory must not be empty")
        if documents_dir == media_dir:
            raise ValueError("export.documents_directory and export.media_directory must differ")

        staging = get_nested(config, 'export.staging_directory', 'export')
        if not staging or not isinstance(staging, str):
            raise ValueError("export.staging_directory must be a non-empty path")
        if os.path.exists(staging) and not os.path.isdir(staging):
            raise ValueError(f"export.staging_directory '{staging}' is not a directory")

        archive_path = get_nested(config, 'export.archive_path', 'export.zip')
        if not archive_path or not isinstance(archive_path, str):
            raise ValueError("export.archive_path must be a non-empty path")
        staging_abs = os.path.abspath(staging)
        if os.path.abspath(archive_path).startswith(staging_abs + os.sep):
            raise ValueError("export.archive_path must not be inside export.staging_directory")

        report_path = get_nested(config, 'export.report_path')
        if report_path is not None and not isinstance(report_path, str):
            raise ValueError("export.report_path must be a file path string")

        log_level = get_nested(config, 'logging.level')
        if log_level is not None and str(log_level).upper() not in {
            'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'
        }:
            raise ValueError(f"logging.level '{log_level}' is not a valid log level")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        if not isinstance(merged.get('export'), dict):
            merged['export'] = {}
        if not isinstance(merged.get('logging'), dict):
            merged['logging'] = {}

        if getattr(args, 'start', None):
            merged['parseFilePath'] = args.start

        if getattr(args, 'max_depth', None) is not None:
            merged['levelNesting'] = args.max_depth

        if getattr(args, 'output', None):
            merged['export']['archive_path'] = args.output

        if getattr(args, 'dry_run', None) is not None:
            merged['export']['dry_run'] = args.dry_run

        if getattr(args, 'keep_staging', None) is not None:
            merged['export']['keep_staging'] = args.keep_staging

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose == 1 and not merged['logging'].get('level'):
            merged['logging']['level'] = 'INFO'

        return merged

    @staticmethod
    def build_settings(config: Dict[str, Any]) -> ExportSettings:
        """
        Turn a validated configuration dictionary into run settings.

        Args:
            config: Configuration dictionary (already validated)

        Returns:
            ExportSettings for one export run
        """
        layout = ExportLayout(
            root=Path(get_nested(config, 'export.staging_directory', 'export')),
            documents_directory=get_nested(config, 'export.documents_directory', 'notes'),
            media_directory=get_nested(config, 'export.media_directory', 'media'),
        )
        report_path = get_nested(config, 'export.report_path')

        return ExportSettings(
            start_document=config['parseFilePath'],
            source_dirs=[Path(p) for p in config['filesPaths']],
            media_root=Path(config['mediaPath']),
            max_depth=config['levelNesting'],
            layout=layout,
            blacklist=list(config.get('blackList') or []),
            archive_path=Path(get_nested(config, 'export.archive_path', 'export.zip')),
            keep_staging=get_nested(config, 'export.keep_staging', False),
            progress_bars=get_nested(config, 'export.progress_bars', True),
            dry_run=get_nested(config, 'export.dry_run', False),
            visit_policy=VisitPolicy(get_nested(config, 'export.visit_policy', 'first_seen')),
            report_path=Path(report_path) if report_path else None,
        )

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "export.archive_path")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'get_nested']
