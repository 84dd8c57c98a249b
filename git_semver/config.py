"""
Configuration management for git-semver.

Handles environment variable loading, validation, and provides a single
configuration object shared by the bump and check-tags commands.
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from loguru import logger

from .versioning import LabelingMode

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
VERSION_SOURCES = ['index', 'worktree']


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str, int, bool)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')

    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no'):
            return False
        return default

    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: str = '') -> str:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_int(cli_args, field_name: str, env_key: str, default: int = 0) -> int:
    """Get integer configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, int)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


@dataclass
class Config:
    """Configuration object containing all application settings."""

    # Manifest
    manifest_path: str
    version_source: str

    # Derivation
    source_extension: Optional[str]
    mode: LabelingMode
    dry_run: bool

    # Git queries
    tag_abbrev_length: int
    commit_id_length: int

    # Logging
    log_level: str


def _validate_git_config(tag_abbrev_length: int, commit_id_length: int, validation_errors: list) -> None:
    """
    Validate git query parameters.

    Args:
        tag_abbrev_length: Abbreviation length passed to git describe
        commit_id_length: Length of the HEAD id used in dotted-with-commit labels
        validation_errors: List to append validation errors
    """
    # 0 would strip the <distance>-g<sha> suffix that dev counting relies on
    if tag_abbrev_length < 4 or tag_abbrev_length > 40:
        validation_errors.append(f'GIT_SEMVER_TAG_ABBREV must be between 4-40 (got: {tag_abbrev_length})')

    if commit_id_length < 4 or commit_id_length > 40:
        validation_errors.append(f'GIT_SEMVER_COMMIT_ID_LENGTH must be between 4-40 (got: {commit_id_length})')


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    manifest_path = get_config_value_str(cli_args, 'manifest', 'GIT_SEMVER_MANIFEST', 'Cargo.toml')
    version_source = get_config_value_str(cli_args, 'version_source', 'GIT_SEMVER_VERSION_SOURCE', 'index').lower()

    # Empty extension disables the filter, so an empty env value is not "unset" here
    extension = getattr(cli_args, 'extension', None) if cli_args else None
    if extension is None:
        extension = os.environ.get('GIT_SEMVER_EXTENSION', 'rs')
    source_extension = extension.strip().lstrip('.') or None
    mode_name = get_config_value_str(cli_args, 'mode', 'GIT_SEMVER_MODE', LabelingMode.DOTTED.value)
    dry_run = get_config_value_bool(cli_args, 'dry_run', 'GIT_SEMVER_DRY_RUN', False)

    tag_abbrev_length = get_config_value_int(cli_args, 'tag_abbrev', 'GIT_SEMVER_TAG_ABBREV', 4)
    commit_id_length = get_config_value_int(cli_args, 'commit_id_length', 'GIT_SEMVER_COMMIT_ID_LENGTH', 5)

    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'INFO').upper()

    validation_errors = []

    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if not manifest_path.strip():
        validation_errors.append('GIT_SEMVER_MANIFEST must not be empty')

    if version_source not in VERSION_SOURCES:
        validation_errors.append(f'GIT_SEMVER_VERSION_SOURCE must be one of {VERSION_SOURCES} (got: {version_source})')

    mode = None
    try:
        mode = LabelingMode.from_name(mode_name)
    except ValueError:
        validation_errors.append(f'GIT_SEMVER_MODE must be one of numeric, dotted, dotted-with-commit (got: {mode_name})')

    _validate_git_config(tag_abbrev_length, commit_id_length, validation_errors)

    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None

    config = Config(
        manifest_path=manifest_path,
        version_source=version_source,
        source_extension=source_extension,
        mode=mode,
        dry_run=dry_run,
        tag_abbrev_length=tag_abbrev_length,
        commit_id_length=commit_id_length,
        log_level=log_level,
    )

    logger.debug(f'GIT_SEMVER_MANIFEST = {config.manifest_path}')
    logger.debug(f'GIT_SEMVER_VERSION_SOURCE = {config.version_source}')
    logger.debug(f'GIT_SEMVER_EXTENSION = {config.source_extension}')
    logger.debug(f'GIT_SEMVER_MODE = {config.mode.value}')
    logger.debug(f'GIT_SEMVER_DRY_RUN = {config.dry_run}')
    logger.debug(f'GIT_SEMVER_TAG_ABBREV = {config.tag_abbrev_length}')
    logger.debug(f'GIT_SEMVER_COMMIT_ID_LENGTH = {config.commit_id_length}')

    return config
