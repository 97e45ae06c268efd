from __future__ import annotations

import os
from pathlib import Path
from typing import Dict


def _load_dotenv(path: str = ".env") -> Dict[str, str]:
    """
    Basic .env loader to populate os.environ without overriding variables
    that are already set. Returns a mapping of parsed key/value pairs.
    """
    env_path = Path(path)
    if not env_path.exists():
        return {}

    parsed: Dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
        parsed[key] = value
    return parsed


_load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from None


def get_results_dir() -> Path:
    """
    Base directory for generated reports.

    Returns:
        Absolute path from ``SIM_CRM_RESULTS_DIR`` (default ``results``),
        relative values resolved against the current working directory.
    """
    results_dir = Path(os.getenv("SIM_CRM_RESULTS_DIR", "results")).expanduser()
    if not results_dir.is_absolute():
        results_dir = Path.cwd() / results_dir
    return results_dir


def get_default_iterations() -> int:
    """Monte Carlo iterations when a request does not specify them (``SIM_CRM_N_ITER``)."""
    return _int_from_env("SIM_CRM_N_ITER", 1000)


def get_default_seed() -> int:
    """Master seed when a request does not specify one (``SIM_CRM_SEED``)."""
    return _int_from_env("SIM_CRM_SEED", 123)
