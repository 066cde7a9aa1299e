"""Configuration and constants."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .merger import BILINGUAL_POSITIONS
from .models import SubtitleFormat
from .providers import DEFAULT_API_CONFIGS, KEYLESS_METHODS
from .text_utils import DEFAULT_SYSTEM_PROMPT, DEFAULT_USER_PROMPT

# Load environment variables once
load_dotenv()

# Environment variables used when a provider block has no apiKey
ENV_API_KEYS = {
    "deepl": "DEEPL_API_KEY",
    "openai": "OPENAI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "azure": "AZURE_API_KEY",
    "azureopenai": "AZURE_OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "groq": "GROQ_API_KEY",
    "siliconflow": "SILICONFLOW_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

OUTPUT_FORMAT_AUTO = "auto"
OUTPUT_FORMATS = (OUTPUT_FORMAT_AUTO, "srt", "vtt", "ass", "lrc")


@dataclass
class TranslatorConfig:
    """Configuration for subtitle translator."""

    # Provider settings
    translation_method: str = "gtxFreeAPI"
    source_language: str = "auto"
    target_language: str = "en"
    api_configs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    llm_prompts: Dict[str, str] = field(default_factory=dict)

    # Output settings
    bilingual_subtitle: bool = False
    bilingual_position: str = "below"
    output_format: str = OUTPUT_FORMAT_AUTO
    output_dir: Path = Path("./translated")
    dry_run: bool = False

    # Processing settings
    parallelism: int = 3
    inter_batch_delay: int = 1000  # ms
    batch_size: int = 5
    timeout: Optional[float] = None  # seconds per file

    def __post_init__(self):
        """Fill the selected provider's API key from the environment if missing."""
        self.output_dir = Path(self.output_dir)
        method = self.translation_method
        block = dict(self.api_configs.get(method) or {})
        env_name = ENV_API_KEYS.get(method)
        if env_name and not block.get("apiKey") and os.environ.get(env_name):
            block["apiKey"] = os.environ[env_name]
            self.api_configs = {**self.api_configs, method: block}

    @property
    def target_languages(self) -> List[str]:
        """Target languages; ``target_language`` may be a comma-separated list."""
        return [code.strip() for code in self.target_language.split(",") if code.strip()]

    @property
    def requested_output_format(self) -> Optional[SubtitleFormat]:
        """Explicit output format, None for auto."""
        if self.output_format == OUTPUT_FORMAT_AUTO:
            return None
        return SubtitleFormat.from_value(self.output_format)

    def provider_config(self) -> Dict[str, Any]:
        """Config block for the selected provider, defaults included."""
        return {
            **DEFAULT_API_CONFIGS.get(self.translation_method, {}),
            **(self.api_configs.get(self.translation_method) or {}),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslatorConfig":
        """Create config from the JSON config-file layout (camelCase keys)."""
        kwargs: Dict[str, Any] = {}
        mapping = {
            "translationMethod": "translation_method",
            "sourceLanguage": "source_language",
            "targetLanguage": "target_language",
            "bilingualSubtitle": "bilingual_subtitle",
            "bilingualPosition": "bilingual_position",
            "outputFormat": "output_format",
            "outputDir": "output_dir",
            "parallel": "parallelism",
            "parallelism": "parallelism",
            "delay": "inter_batch_delay",
            "interBatchDelay": "inter_batch_delay",
            "batchSize": "batch_size",
            "timeout": "timeout",
            "apiConfigs": "api_configs",
            "llmPrompts": "llm_prompts",
        }
        for key, attr in mapping.items():
            if data.get(key) is not None:
                kwargs[attr] = data[key]
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Path) -> "TranslatorConfig":
        """Load a JSON config file."""
        with Path(path).open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_args(cls, args, base: Optional["TranslatorConfig"] = None) -> "TranslatorConfig":
        """
        Create config from argparse namespace.

        Command-line values override ``base`` (usually loaded from --config),
        which overrides the defaults.
        """
        base = base or cls()
        api_configs = {k: dict(v) for k, v in base.api_configs.items()}

        method = getattr(args, "method", None) or base.translation_method
        api_key = getattr(args, "api_key", None)
        if api_key:
            api_configs.setdefault(method, {})["apiKey"] = api_key

        def pick(name: str, default):
            value = getattr(args, name, None)
            return default if value is None else value

        return cls(
            translation_method=method,
            source_language=pick("source", base.source_language),
            target_language=pick("target", base.target_language),
            api_configs=api_configs,
            llm_prompts=dict(base.llm_prompts),
            bilingual_subtitle=getattr(args, "bilingual", False) or base.bilingual_subtitle,
            bilingual_position=pick("position", base.bilingual_position),
            output_format=pick("format", base.output_format),
            output_dir=Path(pick("output", base.output_dir)),
            dry_run=getattr(args, "dry_run", False) or base.dry_run,
            parallelism=pick("parallel", base.parallelism),
            inter_batch_delay=pick("delay", base.inter_batch_delay),
            batch_size=pick("batch_size", base.batch_size),
            timeout=pick("timeout", base.timeout),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON config-file layout."""
        return {
            "translationMethod": self.translation_method,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "bilingualSubtitle": self.bilingual_subtitle,
            "bilingualPosition": self.bilingual_position,
            "outputFormat": self.output_format,
            "outputDir": str(self.output_dir),
            "parallel": self.parallelism,
            "delay": self.inter_batch_delay,
            "batchSize": self.batch_size,
            "apiConfigs": self.api_configs,
            "llmPrompts": self.llm_prompts,
        }

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if self.translation_method not in DEFAULT_API_CONFIGS:
            return f"Unsupported translation method: {self.translation_method}"

        if not self.target_languages:
            return "Target language is required"

        if self.parallelism < 1 or self.parallelism > 10:
            return f"Parallelism must be 1-10, got {self.parallelism}"

        if self.inter_batch_delay < 0:
            return f"Delay must be a non-negative number, got {self.inter_batch_delay}"

        if self.batch_size < 1 or self.batch_size > 50:
            return f"Batch size must be 1-50, got {self.batch_size}"

        if self.timeout is not None and self.timeout <= 0:
            return f"Timeout must be positive, got {self.timeout}"

        if self.bilingual_position not in BILINGUAL_POSITIONS:
            return f"Bilingual position must be one of {', '.join(BILINGUAL_POSITIONS)}, got {self.bilingual_position}"

        if self.output_format not in OUTPUT_FORMATS:
            return f"Output format must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output_format}"

        method = self.translation_method
        if method not in KEYLESS_METHODS and not self.provider_config().get("apiKey"):
            env_name = ENV_API_KEYS.get(method, "")
            return f"API key is required for {method}. Set {env_name} or use --api-key"

        return None


def default_config_template(method: str = "gtxFreeAPI", target: str = "en") -> Dict[str, Any]:
    """Config-file template written by ``subtitle-translator config``."""
    config = TranslatorConfig(translation_method=method, target_language=target)
    template = config.to_dict()
    names = ["deepl", "openai", "google", "azure"]
    # keyless methods such as gtxFreeAPI have nothing to configure
    if DEFAULT_API_CONFIGS.get(method) and method not in names:
        names.append(method)
    template["apiConfigs"] = {name: dict(DEFAULT_API_CONFIGS[name]) for name in names}
    template["llmPrompts"] = {"system": DEFAULT_SYSTEM_PROMPT, "user": DEFAULT_USER_PROMPT}
    return template


# Supported file extensions
SUPPORTED_EXTENSIONS = {".srt", ".vtt", ".ass", ".ssa", ".lrc"}

# Largest file accepted
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB
