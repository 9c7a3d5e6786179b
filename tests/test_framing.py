import pytest

from rxlink.link.framing import ChunkFramer, LineFramer, framer_factory


def test_framer_factory_valid():
    assert isinstance(framer_factory("chunk"), ChunkFramer)
    assert isinstance(framer_factory("line"), LineFramer)


def test_framer_factory_invalid():
    with pytest.raises(ValueError):
        framer_factory("unknown")


def test_chunk_framer_trims_each_read():
    framer = ChunkFramer()
    assert framer.feed(b"  ULTRASONIC:3\r\n") == ["ULTRASONIC:3"]
    assert framer.feed(b"\r\n\t ") == []
    # no reassembly across reads
    assert framer.feed(b"ULTRA") == ["ULTRA"]
    assert framer.feed(b"SONIC:1") == ["SONIC:1"]


def test_chunk_framer_keeps_inner_newlines():
    assert ChunkFramer().feed(b"A:1\nB:2\n") == ["A:1\nB:2"]


def test_chunk_framer_replaces_invalid_bytes():
    assert ChunkFramer().feed(b"OK\xff") == ["OK�"]


def test_line_framer_reassembles_split_lines():
    framer = LineFramer()
    assert framer.feed(b"ULTRA") == []
    assert framer.feed(b"SONIC:5\r\nULTRASONIC:") == ["ULTRASONIC:5"]
    assert framer.feed(b"6\n\n  \n") == ["ULTRASONIC:6"]


def test_line_framer_handles_split_multibyte_sequence():
    framer = LineFramer()
    data = "ção\n".encode()
    assert framer.feed(data[:1]) == []
    assert framer.feed(data[1:]) == ["ção"]
