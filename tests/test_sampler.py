"""Tests for head/tail window computation and exact reads."""

import hashlib
import io

import pytest

from file_imprint.digest import get_hash_function
from file_imprint.errors import ImprintIOError
from file_imprint.sampler import (
    SAMPLE_SIZE,
    SampleWindow,
    Sampler,
    head_window,
    read_exact,
    sample_windows,
    tail_window,
)


def _pattern(length: int) -> bytes:
    """Non-repeating-at-window-size byte pattern."""
    block = bytes(range(251))
    return (block * (length // len(block) + 1))[:length]


class TestSampleSize:
    """Tests for the sample size constant."""

    def test_sample_size_is_512_kib(self):
        """Test that each window is bounded by 512 KiB."""
        assert SAMPLE_SIZE == 0x80000
        assert SAMPLE_SIZE == 512 * 1024


class TestWindows:
    """Tests for head_window, tail_window and sample_windows."""

    def test_empty_file(self):
        """Test that an empty file has an empty head and no tail."""
        assert head_window(0) == SampleWindow(0, 0)
        assert tail_window(0) is None

    def test_small_file(self):
        """Test that a small file is covered by the head alone."""
        assert head_window(100) == SampleWindow(0, 100)
        assert tail_window(100) is None

    def test_exactly_sample_size_has_no_tail(self):
        """Test that the no-tail boundary is inclusive."""
        assert head_window(SAMPLE_SIZE) == SampleWindow(0, SAMPLE_SIZE)
        assert tail_window(SAMPLE_SIZE) is None

    def test_one_past_sample_size_has_one_byte_tail(self):
        """Test that a tail appears at SAMPLE_SIZE + 1."""
        length = SAMPLE_SIZE + 1
        assert head_window(length) == SampleWindow(0, SAMPLE_SIZE)
        assert tail_window(length) == SampleWindow(SAMPLE_SIZE, 1)

    def test_double_sample_size_windows_are_adjacent(self):
        """Test that head and tail touch without overlapping at 2 x SAMPLE_SIZE."""
        head, tail = sample_windows(2 * SAMPLE_SIZE)

        assert head == SampleWindow(0, SAMPLE_SIZE)
        assert tail == SampleWindow(SAMPLE_SIZE, SAMPLE_SIZE)
        assert head.end == tail.offset

    def test_large_file_leaves_unsampled_middle(self):
        """Test that large files have disjoint windows with a gap between them."""
        length = 3 * SAMPLE_SIZE + 17
        head, tail = sample_windows(length)

        assert head == SampleWindow(0, SAMPLE_SIZE)
        assert tail.length == SAMPLE_SIZE
        assert tail.end == length
        assert tail.offset - head.end == SAMPLE_SIZE + 17

    @pytest.mark.parametrize("length", [SAMPLE_SIZE + 1, SAMPLE_SIZE + 4096, 2 * SAMPLE_SIZE - 1])
    def test_tail_never_overlaps_head(self, length):
        """Test that the tail starts at or after the end of the head."""
        head, tail = sample_windows(length)
        assert tail.offset >= head.end
        assert tail.end == length

    def test_negative_length_rejected(self):
        """Test that negative lengths are rejected."""
        with pytest.raises(ValueError):
            head_window(-1)
        with pytest.raises(ValueError):
            tail_window(-1)


class TestReadExact:
    """Tests for read_exact."""

    def test_fills_buffer(self):
        """Test that the buffer is filled from the stream."""
        buffer = bytearray(5)
        read_exact(io.BytesIO(b"hello world"), memoryview(buffer))
        assert bytes(buffer) == b"hello"

    def test_short_read_raises(self):
        """Test that running out of data raises ImprintIOError."""
        buffer = bytearray(10)
        with pytest.raises(ImprintIOError) as exc_info:
            read_exact(io.BytesIO(b"abc"), memoryview(buffer), "stream")

        assert exc_info.value.context["expected"] == 10
        assert exc_info.value.context["actual"] == 3

    def test_handles_partial_reads(self):
        """Test that reads returning fewer bytes than requested are retried."""

        class Trickle(io.RawIOBase):
            def __init__(self, data):
                self._data = data

            def readable(self):
                return True

            def readinto(self, b):
                if not self._data:
                    return 0
                b[0] = self._data[0]
                self._data = self._data[1:]
                return 1

        buffer = bytearray(4)
        read_exact(Trickle(b"abcdef"), memoryview(buffer))
        assert bytes(buffer) == b"abcd"


class TestSampler:
    """Tests for Sampler.digest_windows."""

    def test_head_only(self):
        """Test that a short stream yields only a head digest."""
        data = b"short content"
        sampler = Sampler(get_hash_function("sha256"))

        head, tail = sampler.digest_windows(io.BytesIO(data), len(data))

        assert head.value == hashlib.sha256(data).digest()
        assert tail is None

    def test_head_and_tail(self):
        """Test that head and tail digests cover the expected ranges."""
        data = _pattern(SAMPLE_SIZE + 1000)
        sampler = Sampler(get_hash_function("sha256"))

        head, tail = sampler.digest_windows(io.BytesIO(data), len(data))

        assert head.value == hashlib.sha256(data[:SAMPLE_SIZE]).digest()
        assert tail.value == hashlib.sha256(data[-1000:]).digest()

    def test_buffer_reuse_does_not_leak_head_into_tail(self):
        """Test that the tail digest only covers tail bytes when the buffer is reused."""
        data = b"H" * SAMPLE_SIZE + b"T"
        sampler = Sampler(get_hash_function("sha256"))

        _, tail = sampler.digest_windows(io.BytesIO(data), len(data))

        assert tail.value == hashlib.sha256(b"T").digest()

    def test_uses_given_hash_function(self):
        """Test that the sampler only depends on the hash function it is given."""
        calls = []

        class Recording:
            name = "recording"

            def __call__(self, data):
                calls.append(bytes(data))
                return get_hash_function("sha256")(data)

        data = _pattern(SAMPLE_SIZE + 3)
        Sampler(Recording()).digest_windows(io.BytesIO(data), len(data))

        assert calls == [data[:SAMPLE_SIZE], data[-3:]]

    def test_truncated_stream_raises(self):
        """Test that a stream shorter than the expected length fails."""
        sampler = Sampler(get_hash_function("sha256"))

        with pytest.raises(ImprintIOError):
            sampler.digest_windows(io.BytesIO(b"x" * 10), 20)
