from __future__ import annotations

import config
from config import AdapterConfig, Settings


def test_stream_source_prefers_explicit_video(tmp_path) -> None:
    video = tmp_path / "clip.mp4"

    settings = Settings(home=tmp_path, video_source=video)

    assert settings.stream_source == video


def test_stream_source_uses_shipped_video_then_image(tmp_path) -> None:
    static = tmp_path / "static"
    static.mkdir()
    settings = Settings(home=tmp_path, static_dir=static)

    assert settings.stream_source == static / config.IMAGE_NAME

    (static / config.VIDEO_NAME).write_bytes(b"\x00")
    assert settings.stream_source == static / config.VIDEO_NAME


def test_settings_read_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("VIRTUAL_THINGS_HOME", str(tmp_path))
    monkeypatch.setenv("VIRTUAL_THINGS_VIDEO", str(tmp_path / "v.mp4"))
    monkeypatch.setenv("VIRTUAL_THINGS_FFMPEG", "/opt/ffmpeg")

    settings = Settings()

    assert settings.media_dir == tmp_path / "media" / "virtual-things"
    assert settings.stream_source == tmp_path / "v.mp4"
    assert settings.ffmpeg == "/opt/ffmpeg"


def test_shipped_image_is_found() -> None:
    assert (config.STATIC_DIR / config.IMAGE_NAME).exists()


def test_gateway_custom_things_are_not_copied() -> None:
    thing = {"title": "Anon"}
    raw = {"customThings": [thing]}

    cfg = AdapterConfig.from_gateway(raw)

    assert cfg.custom_things[0] is thing
