from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    aviation_api_base_url: str = os.getenv("AVIATION_API_BASE_URL", "https://api.aviationapi.com")
    aviation_api_timeout_seconds: float = float(os.getenv("AVIATION_API_TIMEOUT_SECONDS", "5"))

    cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "900"))
    cache_maxsize: int = int(os.getenv("CACHE_MAXSIZE", "2048"))

    retry_max_attempts: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    retry_initial_backoff_seconds: float = float(os.getenv("RETRY_INITIAL_BACKOFF_SECONDS", "0.5"))
    retry_backoff_multiplier: float = float(os.getenv("RETRY_BACKOFF_MULTIPLIER", "2.0"))

    circuit_window_size: int = int(os.getenv("CIRCUIT_WINDOW_SIZE", "10"))
    circuit_minimum_calls: int = int(os.getenv("CIRCUIT_MINIMUM_CALLS", "5"))
    circuit_failure_rate_threshold: float = float(os.getenv("CIRCUIT_FAILURE_RATE_THRESHOLD", "0.5"))
    circuit_open_seconds: float = float(os.getenv("CIRCUIT_OPEN_SECONDS", "30"))
    circuit_half_open_calls: int = int(os.getenv("CIRCUIT_HALF_OPEN_CALLS", "1"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
