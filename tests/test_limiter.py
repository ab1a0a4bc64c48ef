from unittest import mock

import pytest

from trafficreplay.limiter import Limiter, parse_limit_options


class RecordingOutput:
    def __init__(self):
        self.written = []
        self.closed = False

    def plugin_write(self, msg):
        self.written.append(msg)
        return len(msg)

    def close(self):
        self.closed = True

    def __str__(self):
        return "Recording Output"


class CountingInput:
    def __init__(self):
        self.reads = 0

    def plugin_read(self):
        self.reads += 1
        return b"GET / HTTP/1.1\r\n\r\n"


class PacedInput(CountingInput):
    def __init__(self):
        super().__init__()
        self.speed_factor = 1.0


@pytest.mark.parametrize(
    "options,expected",
    [("10", (10, False)), ("10%", (10, True)), ("abc", (0, False)), ("%5", (0, False))],
)
def test_parse_limit_options(options, expected):
    assert parse_limit_options(options) == expected


@mock.patch("time.monotonic_ns", return_value=0)
def test_output_limiter(_clock):
    output = RecordingOutput()
    limiter = Limiter(output, "10")
    for _ in range(100):
        limiter.plugin_write(b"GET")
    assert len(output.written) == 10


@mock.patch("time.monotonic_ns", return_value=0)
def test_input_limiter(_clock):
    source = CountingInput()
    limiter = Limiter(source, "10")
    results = [limiter.plugin_read() for _ in range(100)]
    assert source.reads == 100
    assert sum(r is not None for r in results) == 10


def test_window_resets_after_one_second():
    output = RecordingOutput()
    with mock.patch("time.monotonic_ns", return_value=0):
        limiter = Limiter(output, "2")
        for _ in range(5):
            limiter.plugin_write(b"x")
    assert len(output.written) == 2
    with mock.patch("time.monotonic_ns", return_value=2_000_000_000):
        for _ in range(5):
            limiter.plugin_write(b"x")
    assert len(output.written) == 4


def test_percent_limiter_drops_everything():
    output = RecordingOutput()
    limiter = Limiter(output, "0%")
    for _ in range(100):
        limiter.plugin_write(b"GET")
    assert output.written == []


def test_percent_limiter_keeps_everything():
    output = RecordingOutput()
    limiter = Limiter(output, "100%")
    for _ in range(100):
        limiter.plugin_write(b"GET")
    assert len(output.written) == 100


def test_self_pacing_input_gets_speed_factor():
    source = PacedInput()
    limiter = Limiter(source, "50%")
    assert source.speed_factor == 0.5
    assert all(limiter.plugin_read() is not None for _ in range(20))


def test_write_to_reader_only_plugin():
    limiter = Limiter(CountingInput(), "100%")
    with pytest.raises(BrokenPipeError):
        limiter.plugin_write(b"x")


def test_read_from_writer_only_plugin():
    limiter = Limiter(RecordingOutput(), "100%")
    with pytest.raises(BrokenPipeError):
        limiter.plugin_read()


def test_close_and_str():
    output = RecordingOutput()
    limiter = Limiter(output, "10%")
    limiter.close()
    assert output.closed
    assert str(limiter) == "Limiting Recording Output to: 10 (isPercent: true)"