from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    db_path: str = "data/pertcalc.sqlite"
    history_key: str = "pertHistory"
    tz_name: str = "America/Sao_Paulo"
    log_level: str = "INFO"
    default_lambda: float = 4.0


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r} (not a number), using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring {name}={raw!r} (must be >= 1), using {default}")
        return default
    return value


def load_settings() -> Settings:
    """Read settings from the environment.

    Locally: env vars. Streamlit Cloud: set them as app secrets/env.
    """
    defaults = Settings()
    return Settings(
        db_path=os.getenv("PERTCALC_DB_PATH", defaults.db_path),
        history_key=os.getenv("PERTCALC_HISTORY_KEY", defaults.history_key),
        tz_name=os.getenv("TZ", defaults.tz_name),
        log_level=os.getenv("PERTCALC_LOG_LEVEL", defaults.log_level).upper(),
        default_lambda=_float_env("PERTCALC_DEFAULT_LAMBDA", defaults.default_lambda),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
