"""
Virtual Things Configuration - simulation constants and adapter settings
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# Adapter identity
# ============================================================================

ADAPTER_ID = "virtual-things"
THING_CONTEXT = "https://webthings.io/schemas"
BUILTIN_ID_PREFIX = "virtual-things-"
CUSTOM_ID_PREFIX = "virtual-things-custom-"

# ============================================================================
# Simulation timing
# ============================================================================

DRIFT_INTERVAL = 30.0          # seconds between randomized property updates
UNBOUNDED_DRIFT_SPAN = 100     # draw width for numbers missing a bound

LOCK_DELAY = 2.0               # seconds a lock spends in "unknown"
LOCK_JAM_SIDES = 20            # jam roll is randint(0, LOCK_JAM_SIDES - 1)
LOCK_JAM_SENTINEL = 0          # the roll that jams the lock (1 in 20)

TRANSCODE_RETRY_DELAY = 1.0    # only after a failed spawn, not after an exit

# ============================================================================
# Pairing secrets (not real security)
# ============================================================================

PIN = "1234"
USERNAME = "user"
PASSWORD = "password"

# ============================================================================
# Media
# ============================================================================

def _static_dir() -> Path:
    # source checkout first, then the data-files location of a regular install
    candidates = [
        Path(__file__).resolve().parent / "static",
        Path(sys.prefix) / "share" / ADAPTER_ID / "static",
    ]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return candidates[0]


STATIC_DIR = _static_dir()
IMAGE_NAME = "image.png"
VIDEO_NAME = "video.mp4"
DASH_MANIFEST = "index.mpd"
HLS_PLAYLIST = "master.m3u8"
MEDIA_URL_PREFIX = "/media/" + ADAPTER_ID


class Settings(BaseSettings):
    """Environment provided paths and switches."""

    home: Path = Field(
        default=Path(os.path.expanduser("~")) / ".webthings",
        validation_alias=AliasChoices("VIRTUAL_THINGS_HOME", "WEBTHINGS_HOME", "MOZIOT_HOME"),
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    log_json: bool = Field(default=False, validation_alias=AliasChoices("LOG_JSON"))
    transcode_debug: bool = Field(default=False, validation_alias=AliasChoices("TRANSCODE_DEBUG"))
    static_dir: Path = Field(default=STATIC_DIR, validation_alias=AliasChoices("VIRTUAL_THINGS_STATIC"))
    video_source: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("VIRTUAL_THINGS_VIDEO"),
    )
    ffmpeg: str = Field(default="ffmpeg", validation_alias=AliasChoices("VIRTUAL_THINGS_FFMPEG"))

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore", populate_by_name=True)

    @property
    def media_dir(self) -> Path:
        return self.home / "media" / ADAPTER_ID

    @property
    def data_dir(self) -> Path:
        return self.home / "data" / ADAPTER_ID

    @property
    def image_source(self) -> Path:
        return self.static_dir / IMAGE_NAME

    @property
    def stream_source(self) -> Path:
        """Explicit video, else the shipped sample video, else the still image."""
        if self.video_source is not None:
            return self.video_source
        video = self.static_dir / VIDEO_NAME
        if video.exists():
            return video
        return self.image_source


class AdapterConfig(BaseModel):
    """Per-adapter configuration handed over by the gateway."""

    randomize_property_values: bool = Field(
        default=False,
        validation_alias=AliasChoices("randomize_property_values", "randomizePropertyValues"),
    )
    persist_property_values: bool = Field(
        default=False,
        validation_alias=AliasChoices("persist_property_values", "persistPropertyValues"),
    )
    # kept as raw dicts: malformed entries are coerced later, never rejected
    custom_things: List[Dict[str, Any]] = Field(
        default_factory=list,
        validation_alias=AliasChoices("custom_things", "customThings"),
    )

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_gateway(cls, raw: Optional[Dict[str, Any]]) -> "AdapterConfig":
        raw = dict(raw or {})
        things = raw.get("customThings", raw.get("custom_things"))
        if not isinstance(things, list):
            things = []
        things = [t for t in things if isinstance(t, dict)]
        raw.pop("customThings", None)
        raw["custom_things"] = things
        cfg = cls.model_validate(raw)
        # hold the gateway's own dicts so assigned ids reach its saved config
        cfg.custom_things = things
        return cfg


def load_settings() -> Settings:
    return Settings()
