from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip() or default


BASE_DIR = Path(__file__).resolve().parent.parent

# Sampling and suppression policy
SAMPLE_INTERVAL_SECONDS = 2.0
COOLDOWN_SECONDS = 5.0
REQUEST_TIMEOUT_SECONDS = 8.0
JPEG_QUALITY = 80

# Webcam settings
FRAME_WIDTH = 1280
FRAME_HEIGHT = 720


def log_dir() -> Path:
    return Path(_env_str("MEMORY_HELPER_LOG_DIR", str(BASE_DIR / "logs")))


def log_level() -> int:
    level = logging.getLevelName(_env_str("MEMORY_HELPER_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


@dataclass
class ClientConfig:
    base_url: str = "http://127.0.0.1:9000"
    api_key: str = ""
    camera_index: int = 0
    frame_width: int = FRAME_WIDTH
    frame_height: int = FRAME_HEIGHT
    sample_interval_seconds: float = SAMPLE_INTERVAL_SECONDS
    cooldown_seconds: float = COOLDOWN_SECONDS
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    jpeg_quality: int = JPEG_QUALITY

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            base_url=_env_str("MEMORY_HELPER_BASE_URL", "http://127.0.0.1:9000").rstrip("/"),
            api_key=os.getenv("MEMORY_HELPER_API_KEY", "").strip(),
            camera_index=_env_int("MEMORY_HELPER_CAMERA_INDEX", 0),
            frame_width=_env_int("MEMORY_HELPER_FRAME_WIDTH", FRAME_WIDTH),
            frame_height=_env_int("MEMORY_HELPER_FRAME_HEIGHT", FRAME_HEIGHT),
            sample_interval_seconds=max(0.1, _env_float("MEMORY_HELPER_SAMPLE_INTERVAL", SAMPLE_INTERVAL_SECONDS)),
            cooldown_seconds=max(0.0, _env_float("MEMORY_HELPER_COOLDOWN", COOLDOWN_SECONDS)),
            request_timeout_seconds=max(0.5, _env_float("MEMORY_HELPER_REQUEST_TIMEOUT", REQUEST_TIMEOUT_SECONDS)),
            jpeg_quality=min(95, max(30, _env_int("MEMORY_HELPER_JPEG_QUALITY", JPEG_QUALITY))),
        )
