from __future__ import annotations

import pytest

import templates
from devices import VirtualDevice
from drift import random_value


def links_of(template):
    return template["properties"][0]["metadata"]["links"]


@pytest.mark.parametrize("index, template", list(enumerate(templates.virtual_things((4, 1)))))
def test_every_template_builds_a_device(gateway, index, template) -> None:
    device = VirtualDevice(f"virtual-things-{index}", template, gateway=gateway)

    described = device.as_dict()
    assert described["title"].startswith("Virtual")
    assert set(described["properties"]) == set(device.properties)
    for prop in device.properties.values():
        if prop.descriptor.enum:
            assert prop.value in prop.descriptor.enum


def test_catalog_is_rebuilt_on_every_call() -> None:
    first = templates.virtual_things()
    first[0]["properties"].clear()

    assert templates.virtual_things()[0]["properties"]


def test_video_links_depend_on_ffmpeg() -> None:
    assert len(links_of(templates.video_camera(None))) == 1
    assert len(links_of(templates.video_camera((3, 4)))) == 1
    hls = links_of(templates.video_camera((4, 0)))
    assert [link["href"].rsplit("/", 1)[-1] for link in hls] == ["index.mpd", "master.m3u8"]


def test_media_properties_never_drift() -> None:
    for template in (templates.camera(), templates.video_camera()):
        device = VirtualDevice("cam", template)
        media = device.properties.get("image") or device.properties.get("video")
        assert random_value(media.descriptor) == (False, None)
