import hashlib
import io
import os
import threading
import tracemalloc
from concurrent.futures import ThreadPoolExecutor

import pytest

from bucketfs.base.filestore.config import MIN_PART_SIZE
from bucketfs.base.filestore.errors import InvalidOperationError

MiB = 1024 * 1024


@pytest.mark.parametrize("size", [0, 1, 5 * MiB, 5 * MiB + 1, 12 * MiB])
def test_round_trip(fs, size):
    data = os.urandom(size)
    fs.write_bytes("obj.bin", data)
    assert fs.stat("obj.bin").size == size
    assert fs.read_bytes("obj.bin") == data


def test_empty_file_needs_no_fetch(fs, store):
    fs.write_bytes("empty", b"")
    store.calls.clear()
    assert fs.read_bytes("empty") == b""
    assert store.calls["get_object"] == 0


def test_seek_and_read_at(fs):
    data = os.urandom(300_000)
    fs.write_bytes("f", data)

    with fs.open("f") as f:
        assert f.seekable()
        assert f.read_at(10, 100) == data[100:110]
        assert f.tell() == 110
        assert f.read_at(5, 110) == data[110:115]

        assert f.seek(-10, io.SEEK_END) == len(data) - 10
        assert f.read_at(100, len(data) - 10) == data[-10:]

        assert f.seek(len(data)) == len(data)
        assert f.read(5) == b""

        f.seek(1000)
        assert f.seek(24, io.SEEK_CUR) == 1024
        assert f.read_at(1024, 1024) == data[1024:2048]


def test_seek_out_of_bounds_makes_no_call(fs, store):
    fs.write_bytes("f", b"0123456789")
    with fs.open("f") as f:
        store.calls.clear()
        with pytest.raises(InvalidOperationError):
            f.seek(11)
        with pytest.raises(InvalidOperationError):
            f.seek(-1)
        with pytest.raises(InvalidOperationError):
            f.seek(1, io.SEEK_END)
        assert sum(store.calls.values()) == 0
        assert f.tell() == 0


def test_same_position_does_not_refetch(fs, store):
    fs.write_bytes("f", bytes(range(256)) * 100)
    with fs.open("f") as f:
        store.calls.clear()
        assert f.read_at(10, 0) == bytes(range(10))
        assert store.calls["get_object"] == 1

        f.seek(10)
        assert f.read_at(10, 10) == bytes(range(10, 20))
        assert store.calls["get_object"] == 1

        f.seek(0)
        assert f.read_at(3, 0) == b"\x00\x01\x02"
        assert store.calls["get_object"] == 2


def test_wrong_mode(fs):
    fs.write_bytes("f", b"abc")
    with fs.open("f") as f:
        assert not f.writable()
        with pytest.raises(InvalidOperationError):
            f.write(b"x")

    with fs.create("g") as w:
        assert not w.readable()
        assert not w.seekable()
        with pytest.raises(InvalidOperationError):
            w.read(1)
        with pytest.raises(InvalidOperationError):
            w.seek(0)


def test_closed_handle(fs):
    fs.write_bytes("f", b"abc")
    f = fs.open("f")
    f.close()
    f.close()
    assert f.closed
    with pytest.raises(ValueError):
        f.read(1)


def test_write_at_sequential(fs):
    with fs.create("w") as f:
        f.write_at(b"abc", 0)
        f.write_at(b"def", 3)
        with pytest.raises(InvalidOperationError):
            f.write_at(b"x", 1)
        assert f.tell() == 6
    assert fs.read_bytes("w") == b"abcdef"


def test_write_at_gap_fails_without_blocking(fs):
    first = os.urandom(MIN_PART_SIZE + 123)
    done = threading.Event()
    errors = []

    def gap_write(f):
        try:
            f.write_at(b"tail", len(first) + 10)
        except InvalidOperationError as e:
            errors.append(e)
        finally:
            done.set()

    with fs.create("w") as f:
        f.write_at(first, 0)
        threading.Thread(target=gap_write, args=(f,), daemon=True).start()
        assert done.wait(timeout=5)
        assert len(errors) == 1
        f.write_at(b"tail", len(first))
    assert fs.read_bytes("w") == first + b"tail"


def test_parallel_chunk_reads(fs):
    size = 12 * MiB + 17
    data = os.urandom(size)
    fs.write_bytes("big", data)

    chunk = 3 * MiB
    offsets = list(range(0, size, chunk))

    def fetch(offset: int) -> bytes:
        with fs.open("big") as f:
            return f.read_at(chunk, offset)

    with ThreadPoolExecutor(max_workers=4) as pool:
        parts = list(pool.map(fetch, offsets))

    with fs.open("big") as f:
        sequential = f.read()

    assert hashlib.sha256(b"".join(parts)).hexdigest() == hashlib.sha256(sequential).hexdigest()
    assert sequential == data


def test_read_error_is_not_a_short_read(fs, store):
    fs.write_bytes("f", os.urandom(3 * MiB))
    store.fail_after = MiB
    with fs.open("f") as f:
        with pytest.raises(ConnectionError):
            f.read()


def test_write_error_surfaces(fs, store):
    store.faults["put_object"] = OSError("quota exceeded")
    with pytest.raises(OSError, match="quota exceeded"):
        with fs.create("f") as f:
            f.write(b"a" * 100)
    store.faults.clear()
    assert not fs.exists("f")


def test_memory_stays_bounded(fs):
    size = 48 * MiB
    block = MiB

    tracemalloc.start()
    try:
        h = hashlib.sha256()
        with fs.create("huge") as f:
            for _ in range(size // block):
                piece = os.urandom(block)
                h.update(piece)
                f.write(piece)
        _, write_peak = tracemalloc.get_traced_memory()

        tracemalloc.reset_peak()
        r = hashlib.sha256()
        with fs.open("huge") as f:
            while True:
                piece = f.read(block)
                if not piece:
                    break
                r.update(piece)
        _, read_peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert r.hexdigest() == h.hexdigest()
    assert write_peak < size // 2
    assert read_peak < size // 4
