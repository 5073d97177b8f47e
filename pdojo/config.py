"""Settings for pdojo, loaded once when the module is first imported.

API keys for the LLM clients come from a `.env` file at the project root.
Everything else comes from `config.yaml` next to this file, or from the YAML
file named by the PDOJO_CONFIG environment variable. Keys missing from the
file fall back to DEFAULTS.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
load_dotenv(PACKAGE_DIR.parent / ".env")

CONFIG_PATH = Path(os.environ.get("PDOJO_CONFIG", PACKAGE_DIR / "config.yaml"))

DEFAULTS = {
    "pattern_source": "static",
    "catalog_path": "./challenges.yaml",
    "evaluator": "heuristic",
    "source_timeout_seconds": 30,
    "evaluation_timeout_seconds": 60,
    "llm_max_retries": 3,
    "heuristic_delay_seconds": 1.0,
    "heuristic_failure_rate": 0.0,
    "heuristic_min_lines": 3,
    "output_path": "./output/report.md",
}


def load_config(path: Path) -> dict:
    """Read a YAML config file and layer it over DEFAULTS."""
    loaded = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path} must contain a mapping of settings.")
    return {**DEFAULTS, **loaded}


_config = load_config(CONFIG_PATH)


def get_config() -> dict:
    return _config
