"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import AdmitWriterConfig


def load_config(cli_path: str | None = None) -> AdmitWriterConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./admitwriter.yaml"),
        Path.home() / ".admitwriter" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return AdmitWriterConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return AdmitWriterConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `admitwriter config init`
DEFAULT_CONFIG_TEMPLATE = """\
# admitwriter.yaml

# Text-generation service
llm:
  provider: "openai"           # openai | anthropic | google | ollama | auto
  model: "gpt-4o"
  api_key_env: "OPENAI_API_KEY"
  max_tokens: 4000             # ceiling for a full SOP
  section_max_tokens: 1000     # ceiling for a single section
  temperature: 0.7
  timeout: 60
  # base_url: "http://localhost:11434"

# Statement of Purpose writer
writer:
  quorum: 3                    # written sections needed before assembly (1-5)
  default_word_limit: 1000
  default_tone: "conversational"   # professional | conversational | confident | humble
  opening_excerpt_chars: 100   # how much of the opening the closing prompt echoes

# SOP review
review:
  min_chars: 100
  temperature: 0.3
  max_tokens: 2000

# Saved documents
output:
  base_dir: ".admitwriter"
  create_index: true

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
