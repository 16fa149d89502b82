import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "cache": "memory",  # "memory" | "none"
    "cache_ttl_hours": 24,
    "sweep_interval_minutes": 60,
    "max_diff_bytes": 50 * 1024,
    "review_max_tokens": 4096,
    "fix_max_tokens": 8192,
    "search_workers": 1,  # 1 = one code search at a time, in symbol order
    "guidelines": None,  # None = no team guidelines; set to a path string to append one to review prompts
    "host": "127.0.0.1",
    "port": 3001,
}


def load_config(config_path: str = ".codepulse.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .codepulse.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def load_guidelines(config: dict) -> str:
    """
    Load optional team review guidelines.

    If ``guidelines`` is set in config, loads from that path (relative to cwd).
    Otherwise returns an empty string and the review prompt carries none.
    """
    custom_path = config.get("guidelines")
    if not custom_path:
        return ""
    p = Path(custom_path)
    if not p.exists():
        raise FileNotFoundError(f"Guidelines file not found: {custom_path}")
    return p.read_text()
