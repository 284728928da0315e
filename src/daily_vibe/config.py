"""Configuration loading, saving and logging setup."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

from .timeutils import DEFAULT_TIMEZONE

Provider = Literal["openai", "anthropic", "generic"]
PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "generic")

DEFAULT_REDACT_PATTERNS = [
    r"sk-[a-zA-Z0-9]{48}",  # OpenAI API keys
    r"sk-ant-[a-zA-Z0-9-]{95}",  # Anthropic API keys
    r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",  # Email addresses
    r"\b\d{3}-\d{2}-\d{4}\b",  # SSN
    r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b",  # Phone numbers
    r"ghp_[a-zA-Z0-9]{36}",  # GitHub personal access tokens
    r"Bearer [a-zA-Z0-9_=-]+",  # Bearer tokens
]


@dataclass
class LLMConfig:
    provider: Provider = "openai"
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None


@dataclass
class RedactConfig:
    enabled: bool = True
    patterns: list[str] = field(default_factory=lambda: list(DEFAULT_REDACT_PATTERNS))


@dataclass
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    output_dir: str = "reports"
    redact: RedactConfig = field(default_factory=RedactConfig)
    timezone: str = DEFAULT_TIMEZONE


# On-disk keys use the camelCase names shared with other tools.
_LLM_KEYS = {"provider": "provider", "apiKey": "api_key", "baseUrl": "base_url", "model": "model"}


def get_app_home() -> Path:
    env = os.environ.get("DAILY_VIBE_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".daily-vibe"


def get_config_path() -> Path:
    return get_app_home() / "config.json"


def merge_with_defaults(data: dict) -> AppConfig:
    """Merge a raw config mapping with defaults, field by field."""
    defaults = AppConfig()

    llm_data = data.get("llm") or {}
    llm_values = asdict(defaults.llm)
    for key, attr in _LLM_KEYS.items():
        if llm_data.get(key) is not None:
            llm_values[attr] = llm_data[key]

    redact_data = data.get("redact") or {}
    enabled = redact_data.get("enabled")
    patterns = redact_data.get("patterns")

    return AppConfig(
        llm=LLMConfig(**llm_values),
        output_dir=data.get("outputDir") or defaults.output_dir,
        redact=RedactConfig(
            enabled=defaults.redact.enabled if enabled is None else bool(enabled),
            patterns=list(patterns) if patterns else defaults.redact.patterns,
        ),
        timezone=data.get("timezone") or defaults.timezone,
    )


def config_to_dict(config: AppConfig) -> dict:
    llm = {key: getattr(config.llm, attr) for key, attr in _LLM_KEYS.items() if getattr(config.llm, attr) is not None}
    return {
        "llm": llm,
        "outputDir": config.output_dir,
        "redact": {"enabled": config.redact.enabled, "patterns": config.redact.patterns},
        "timezone": config.timezone,
    }


def load_config(path: Path | None = None) -> AppConfig:
    """Load the config file, falling back to defaults when missing or invalid."""
    path = path or get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return AppConfig()
    except (OSError, json.JSONDecodeError) as e:
        logging.getLogger("daily_vibe.config").warning("Ignoring unreadable config %s: %s", path, e)
        return AppConfig()

    if not isinstance(data, dict):
        return AppConfig()
    return merge_with_defaults(data)


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_to_dict(config), indent=2), encoding="utf-8")
    return path


def update_llm_config(updates: dict, path: Path | None = None) -> AppConfig:
    """Merge LLM settings (snake_case keys) into the saved config."""
    config = load_config(path)
    for attr, value in updates.items():
        if not hasattr(config.llm, attr):
            raise ValueError(f"Unknown LLM setting: {attr}")
        setattr(config.llm, attr, value)
    save_config(config, path)
    return config


def configure_logging(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("daily_vibe")
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)
    if logger.handlers:
        return logger

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
