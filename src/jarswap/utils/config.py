"""Configuration management with YAML overrides"""
import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from jarswap.core.protocols import ConfigLoader
from jarswap.core.implementations import YamlConfigLoader
from jarswap.exceptions import ConfigError

CONFIG_ENV_VAR = 'JARSWAP_CONFIG'
USER_CONFIG_PATH = '~/.jarswap.yaml'

DEFAULT_CONFIG: Dict[str, Any] = {
    'source_extension': '.java',
    'artifact_extension': '.class',
    'local_working_dir': '.jar-prepare',
    'remote_working_dir': '.jar-swap',
    'ssh': {
        'port': 22,
        'options': [],
        'remote_command': 'jarswap',
    },
}


@dataclass
class SshSettings:
    port: int = 22
    options: List[str] = field(default_factory=list)
    remote_command: str = 'jarswap'


@dataclass
class SwapConfig:
    """Resolved settings for one invocation."""
    source_extension: str = '.java'
    artifact_extension: str = '.class'
    local_working_dir: str = '.jar-prepare'
    remote_working_dir: str = '.jar-swap'
    ssh: SshSettings = field(default_factory=SshSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SwapConfig':
        ssh = data.get('ssh', {})
        try:
            port = int(ssh['port'])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"ssh.port must be an integer, got {ssh['port']!r}") from e
        if not isinstance(ssh['options'], list):
            raise ConfigError("ssh.options must be a list")

        for key in ('source_extension', 'artifact_extension'):
            if not str(data[key]).startswith('.'):
                raise ConfigError(f"{key} must start with '.', got {data[key]!r}")
        for key in ('local_working_dir', 'remote_working_dir'):
            name = str(data[key])
            if not name or '/' in name or name in ('.', '..'):
                raise ConfigError(f"{key} must be a plain directory name, got {name!r}")

        return cls(
            source_extension=str(data['source_extension']),
            artifact_extension=str(data['artifact_extension']),
            local_working_dir=str(data['local_working_dir']),
            remote_working_dir=str(data['remote_working_dir']),
            ssh=SshSettings(
                port=port,
                options=[str(o) for o in ssh['options']],
                remote_command=str(ssh['remote_command']),
            ),
        )


def _merge(base: Dict[str, Any], overrides: Dict[str, Any], prefix: str = '') -> Dict[str, Any]:
    """Recursively apply overrides onto base, rejecting unknown keys."""
    for key, value in overrides.items():
        if key not in base:
            raise ConfigError(f"Unknown config key: {prefix}{key}")
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ConfigError(f"Config key {prefix}{key} must be a mapping")
            _merge(base[key], value, prefix=f"{prefix}{key}.")
        else:
            base[key] = value
    return base


def find_config_file(explicit: Optional[str] = None) -> Optional[str]:
    """Pick the config file: --config, then $JARSWAP_CONFIG, then ~/.jarswap.yaml.

    An explicit or environment path must exist; the user file is optional.
    """
    if explicit:
        if not Path(explicit).is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        if not Path(env_path).is_file():
            raise ConfigError(f"Config file not found: {env_path} (from ${CONFIG_ENV_VAR})")
        return env_path

    user_path = Path(USER_CONFIG_PATH).expanduser()
    if user_path.is_file():
        return str(user_path)
    return None


def load_config(
    config_path: Optional[str] = None,
    config_loader: Optional[ConfigLoader] = None
) -> SwapConfig:
    """Load defaults plus any YAML overrides.

    Args:
        config_path: Explicit config file (from --config)
        config_loader: Loader used to parse the file (default: YamlConfigLoader)

    Returns:
        SwapConfig with overrides applied

    Raises:
        ConfigError: If the file is missing, malformed, or has unknown keys
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    path = find_config_file(config_path)
    if path is None:
        return SwapConfig.from_dict(config)

    loader = config_loader or YamlConfigLoader()
    try:
        overrides = loader.load_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if overrides is None:
        overrides = {}
    if not isinstance(overrides, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return SwapConfig.from_dict(_merge(config, overrides))
