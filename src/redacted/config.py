from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

# ---- Names used across the engine ----
ObscuringKind = Literal["char", "pattern"]
PartitionPolicy = Literal["line", "paragraph"]

CONFIG_ENV = "REDACTED_CONFIG"


# ---- Obscuring (what hidden text looks like) ----
class ObscuringConfig(BaseModel):
    # None disables redaction entirely: redact calls become no-ops.
    kind: Optional[ObscuringKind] = "char"
    char: str = Field(default="*", min_length=1, max_length=1)
    pattern: str = "non-space"  # preset name from obscure/presets or a raw regex
    replacement: str = "*"


# ---- Automatic viewport redaction ----
class AutoConfig(BaseModel):
    partition: PartitionPolicy = "line"
    # Triggers that never cause a rescan (typing would rescan on every key otherwise)
    excluded_triggers: List[str] = Field(default_factory=lambda: ["self-insert"])


# ---- Root config ----
class RedactedConfig(BaseModel):
    obscuring: ObscuringConfig = Field(default_factory=ObscuringConfig)
    auto: AutoConfig = Field(default_factory=AutoConfig)


# ---- Loader ----
def load_config(path: Optional[Path] = None) -> RedactedConfig:
    """
    Read a YAML config file.

    Without an explicit path the ``REDACTED_CONFIG`` environment variable is
    consulted; with neither, defaults are returned.
    """
    if not path:
        env = os.getenv(CONFIG_ENV)
        if not env:
            return RedactedConfig()
        path = Path(env)
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    try:
        return RedactedConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e
