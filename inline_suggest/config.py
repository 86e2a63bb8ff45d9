"""
InlineSuggest Configuration Module
==================================
Centralized configuration for the suggestion engine and its sources.

Configuration can be set via:
1. Environment variables (INLINE_SUGGEST_LANGUAGETOOL_ENABLED=false)
2. Config file (inline_suggest_config.json, or the path in INLINE_SUGGEST_CONFIG)
3. Direct API calls (config.set('pov.ai_window', 20))

Defaults run fully offline except for the remote grammar service, which
hosts can disable.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict

__version__ = "1.0.0"

# Default configuration path
CONFIG_FILE = Path.cwd() / "inline_suggest_config.json"
ENV_PREFIX = "INLINE_SUGGEST_"

_log = logging.getLogger(__name__)


@dataclass
class LanguageToolConfig:
    """Remote grammar service (LanguageTool) configuration."""
    enabled: bool = True
    language: str = "en-US"
    server_url: str = "https://api.languagetool.org"
    # Category toggles; a False toggle puts the category on the disabled list
    typos: bool = True
    grammar: bool = True
    style: bool = True
    punctuation: bool = True
    request_timeout: Optional[float] = None

    def disabled_categories(self) -> List[str]:
        """Build the disabled-category list sent with every request."""
        disabled = []
        if not self.typos:
            disabled.append("TYPOS")
        if not self.grammar:
            disabled.append("GRAMMAR")
        if not self.style:
            disabled.append("STYLE")
        if not self.punctuation:
            disabled.append("PUNCTUATION")
        return disabled


@dataclass
class LocalRulesConfig:
    """Deterministic local rules and user-defined rules."""
    enabled: bool = True
    disabled_rules: list = field(default_factory=list)
    max_pattern_length: int = 500
    max_matches_per_rule: int = 200
    rule_time_budget_ms: float = 50.0


@dataclass
class POVConfig:
    """Point-of-view inference and propagation."""
    enabled: bool = True
    ai_window: int = 15  # characters either side of the cursor


@dataclass
class AIConfig:
    """AI category/coreference collaborator (Gemini)."""
    enabled: bool = True
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GOOGLE_API_KEY"
    request_timeout: Optional[float] = None

    @property
    def api_key(self) -> str:
        return os.environ.get(self.api_key_env, "")


@dataclass
class CacheConfig:
    """AI result cache."""
    capacity: int = 256


@dataclass
class LoggingConfig:
    """Structured logging."""
    level: str = "INFO"
    format: str = "json"  # Options: json, text
    to_console: bool = True
    to_file: bool = False
    propagate: bool = False
    log_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")


@dataclass
class EngineConfig:
    """Master configuration."""
    languagetool: LanguageToolConfig = field(default_factory=LanguageToolConfig)
    local_rules: LocalRulesConfig = field(default_factory=LocalRulesConfig)
    pov: POVConfig = field(default_factory=POVConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load configuration from defaults, file and environment."""
    config = EngineConfig()

    path = path or Path(os.environ.get(ENV_PREFIX + "CONFIG", CONFIG_FILE))
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
            _apply_dict_to_config(config, file_config)
        except (json.JSONDecodeError, IOError) as e:
            _log.warning("Could not load config file %s: %s", path, e)

    _apply_env_to_config(config)
    return config


def _apply_dict_to_config(config: EngineConfig, data: Dict[str, Any]):
    """Apply dictionary values to config object."""
    for section_name, section_data in data.items():
        if hasattr(config, section_name) and isinstance(section_data, dict):
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    if key == 'log_dir':
                        value = Path(value)
                    setattr(section, key, value)


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def _parse_list(value: str) -> list:
    return [v.strip() for v in value.split(',') if v.strip()]


ENV_MAPPINGS = {
    'LANGUAGETOOL_ENABLED': ('languagetool', 'enabled', _parse_bool),
    'LANGUAGETOOL_LANGUAGE': ('languagetool', 'language', str),
    'LANGUAGETOOL_URL': ('languagetool', 'server_url', str),
    'LANGUAGETOOL_TIMEOUT': ('languagetool', 'request_timeout', float),
    'LOCAL_RULES_ENABLED': ('local_rules', 'enabled', _parse_bool),
    'LOCAL_RULES_DISABLED': ('local_rules', 'disabled_rules', _parse_list),
    'POV_ENABLED': ('pov', 'enabled', _parse_bool),
    'POV_AI_WINDOW': ('pov', 'ai_window', int),
    'AI_ENABLED': ('ai', 'enabled', _parse_bool),
    'AI_MODEL': ('ai', 'model', str),
    'AI_TIMEOUT': ('ai', 'request_timeout', float),
    'CACHE_CAPACITY': ('cache', 'capacity', int),
    'LOG_LEVEL': ('logging', 'level', str),
    'LOG_FORMAT': ('logging', 'format', str),
    'LOG_TO_FILE': ('logging', 'to_file', _parse_bool),
}


def _apply_env_to_config(config: EngineConfig):
    """Apply environment variables to config."""
    for suffix, (section, key, converter) in ENV_MAPPINGS.items():
        env_var = ENV_PREFIX + suffix
        value = os.environ.get(env_var)
        if value is not None:
            try:
                section_obj = getattr(config, section)
                setattr(section_obj, key, converter(value))
            except (ValueError, AttributeError) as e:
                _log.warning("Invalid env var %s=%s: %s", env_var, value, e)


def get(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dot-notation key.

    Example: get('languagetool.language') -> 'en-US'
    """
    obj = get_config()
    for part in key.split('.'):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            return default
    return obj


def set(key: str, value: Any):
    """
    Set a configuration value by dot-notation key.

    Example: set('pov.enabled', False)
    """
    config = get_config()
    parts = key.split('.')

    if len(parts) != 2:
        raise ValueError(f"Key must be in format 'section.key': {key}")

    section_name, attr_name = parts
    if not hasattr(config, section_name):
        raise ValueError(f"Unknown config section: {section_name}")
    section = getattr(config, section_name)
    if not hasattr(section, attr_name):
        raise ValueError(f"Unknown config key: {attr_name}")
    setattr(section, attr_name, value)


def save_config(path: Optional[Path] = None):
    """Save current configuration to file."""
    path = path or CONFIG_FILE
    data = asdict(get_config())
    data['logging']['log_dir'] = str(data['logging']['log_dir'])
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def reset_config():
    """Reset configuration to defaults."""
    global _config
    _config = EngineConfig()
