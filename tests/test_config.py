import dataclasses

import pytest

from rxlink import LinkConfig, PeerHandle


def test_defaults():
    config = LinkConfig()
    assert config.read_buffer_size == 1024
    assert config.framing == "chunk"
    assert config.not_connected_message == "not connected"
    assert config.write_failure_is_loss is False


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        LinkConfig().framing = "line"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"read_buffer_size": 0},
        {"join_timeout": 0},
        {"lock_poll_interval": -1},
        {"framing": "xml"},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        LinkConfig(**kwargs)


def test_peer_handle():
    peer = PeerHandle("ESP32", "00:11:22:33:44:55")
    assert peer.channel == 1
    assert str(peer) == "ESP32[00:11:22:33:44:55]"
    with pytest.raises(ValueError):
        PeerHandle("x", "")
    with pytest.raises(ValueError):
        PeerHandle("x", "00:11:22:33:44:55", channel=31)
