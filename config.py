import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".cardcoach"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

def load_config() -> Dict[str, Any]:
    """Load config from ~/.cardcoach/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., CARDCOACH_TIMEZONE env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    scheduler_cfg = config.get("scheduler", {})
    config["scheduler"] = {
        "timezone": os.getenv("CARDCOACH_TIMEZONE", scheduler_cfg.get("timezone", "UTC")),
        "min_ease_factor": float(os.getenv(
            "CARDCOACH_MIN_EASE_FACTOR", scheduler_cfg.get("min_ease_factor", 1.3)
        )),
        "first_interval": int(scheduler_cfg.get("first_interval", 1)),
        "second_interval": int(scheduler_cfg.get("second_interval", 6)),
        "maximum_interval": int(scheduler_cfg.get("maximum_interval", 36500)),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("CARDCOACH_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("CARDCOACH_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": int(os.getenv("CARDCOACH_PORT", server_cfg.get("port", 8000))),
    }
    return config
