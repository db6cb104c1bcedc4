from pathlib import Path
from typing import Optional
import os

from npmpull.domain.models import Settings, DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT, DEFAULT_OUTPUT_DIR

REGISTRY_URL_ENV_VAR = "NPMPULL_REGISTRY_URL"
TIMEOUT_ENV_VAR = "NPMPULL_TIMEOUT"
OUTPUT_DIR_ENV_VAR = "NPMPULL_OUTPUT_DIR"

_settings: Optional[Settings] = None

def load_settings() -> Settings:
    """
    Build Settings from the environment. Invalid values raise
    pydantic.ValidationError.
    """
    output_dir = os.environ.get(OUTPUT_DIR_ENV_VAR) or DEFAULT_OUTPUT_DIR
    return Settings(
        registry_url=os.environ.get(REGISTRY_URL_ENV_VAR) or DEFAULT_REGISTRY_URL,
        timeout=os.environ.get(TIMEOUT_ENV_VAR) or DEFAULT_TIMEOUT,
        output_dir=Path(output_dir).expanduser(),
    )

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings

def reset_settings() -> None:
    """Forget cached settings (used when the environment changes)."""
    global _settings
    _settings = None
