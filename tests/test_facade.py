import gc
import time

import pytest

from bucketfs.base.filestore import BucketDirectory, BucketFile, BucketFs, FsConfig
from bucketfs.base.filestore.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    InvalidOperationError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    PartialRenameError,
    StoreTimeoutError,
)


@pytest.mark.parametrize("root", ["", ".", "/"])
def test_stat_root(fs, store, root):
    info = fs.stat(root)
    assert info.is_dir
    assert info.size == 0
    assert sum(store.calls.values()) == 0


def test_stat_file_and_missing(fs):
    fs.write_bytes("notes/a.txt", b"hello")
    info = fs.stat("/notes//a.txt")
    assert info.is_file
    assert info.size == 5
    assert info.name == "a.txt"
    assert fs.stat("notes").is_dir

    with pytest.raises(NotFoundError) as ei:
        fs.stat("notes/b.txt")
    assert isinstance(ei.value, FileNotFoundError)
    assert ei.value.filename == "notes/b.txt"


def test_mkdir_and_list_marker_only(fs, store):
    info = fs.mkdir("empty")
    assert info.is_dir
    assert store.head_object("empty/.keep").size == 0
    assert [e.name for e in fs.list("empty")] == ["."]
    assert fs.listdir("empty") == []


def test_list_children(fs):
    fs.mkdir("p")
    fs.mkdir("p/a")
    fs.write_bytes("p/b/inner.bin", b"x")
    fs.write_bytes("p/c.txt", b"abc")
    assert [e.name for e in fs.list("p")] == [".", "a", "b", "c.txt"]
    assert fs.listdir("p") == ["a", "b", "c.txt"]


def test_list_missing_and_file(fs):
    assert fs.list("missing") == []
    fs.write_bytes("f", b"")
    with pytest.raises(NotDirectoryError):
        fs.list("f")


def test_mkdir_is_idempotent(fs, store):
    fs.mkdir("d")
    store.calls.clear()
    assert fs.mkdir("d").is_dir
    assert store.calls["put_object"] == 0


def test_mkdir_on_file(fs):
    fs.write_bytes("f", b"1")
    with pytest.raises(AlreadyExistsError):
        fs.mkdir("f")


def test_makedirs_marks_every_level(fs, store):
    fs.makedirs("a/b/c")
    for key in ["a/.keep", "a/b/.keep", "a/b/c/.keep"]:
        assert store.head_object(key) is not None
    assert fs.is_dir("a/b/c")


def test_remove(fs):
    fs.remove("missing")

    fs.write_bytes("f", b"1")
    fs.remove("f")
    assert not fs.exists("f")

    fs.mkdir("d")
    with pytest.raises(IsDirectoryError):
        fs.remove("d")
    with pytest.raises(IsDirectoryError):
        fs.remove("/")


def test_rmdir(fs, store):
    with pytest.raises(InvalidOperationError):
        fs.rmdir("")
    with pytest.raises(NotFoundError):
        fs.rmdir("missing")

    fs.write_bytes("f", b"1")
    with pytest.raises(NotDirectoryError):
        fs.rmdir("f")

    fs.mkdir("d")
    fs.write_bytes("d/child", b"1")
    with pytest.raises(DirectoryNotEmptyError):
        fs.rmdir("d")

    fs.remove("d/child")
    fs.rmdir("d")
    assert store.head_object("d/.keep") is None
    assert not fs.exists("d")


def test_rmdir_removes_folder_object(fs, store, put):
    put("dir/")
    assert fs.is_dir("dir")
    assert fs.list("dir")[0].name == "."

    fs.rmdir("dir")
    assert store.head_object("dir/") is None
    assert not fs.exists("dir")


def test_rename(fs):
    fs.write_bytes("a.txt", b"payload")
    fs.rename("a.txt", "moved/b.txt")
    assert not fs.exists("a.txt")
    assert fs.read_bytes("moved/b.txt") == b"payload"


def test_rename_onto_directory_leaves_source(fs):
    fs.write_bytes("a.txt", b"payload")
    fs.mkdir("d")
    with pytest.raises(IsDirectoryError):
        fs.rename("a.txt", "d")
    assert fs.read_bytes("a.txt") == b"payload"


def test_rename_errors(fs, store):
    with pytest.raises(NotFoundError):
        fs.rename("missing", "x")

    fs.mkdir("d")
    with pytest.raises(IsDirectoryError):
        fs.rename("d", "e")

    fs.write_bytes("same", b"1")
    store.calls.clear()
    fs.rename("same", "./same")
    assert store.calls["copy_object"] == 0
    assert fs.exists("same")


def test_partial_rename(fs, store):
    fs.write_bytes("a", b"1")
    cause = OSError("delete refused")
    store.faults["delete_object"] = cause

    with pytest.raises(PartialRenameError) as ei:
        fs.rename("a", "b")
    assert ei.value.__cause__ is cause
    assert (ei.value.src, ei.value.dst) == ("a", "b")

    store.faults.clear()
    assert fs.exists("a")
    assert fs.exists("b")


def test_copy(fs):
    fs.write_bytes("src", b"data")
    fs.copy("src", "dst")
    assert fs.read_bytes("src") == fs.read_bytes("dst") == b"data"
    fs.mkdir("d")
    with pytest.raises(IsDirectoryError):
        fs.copy("src", "d")


def test_open_directory(fs):
    fs.mkdir("d")
    fs.write_bytes("d/x", b"1")
    with fs.open("d") as h:
        assert isinstance(h, BucketDirectory)
        assert [e.name for e in h.list()] == [".", "x"]
        with pytest.raises(IsDirectoryError):
            h.read()

    with fs.open("") as root:
        assert isinstance(root, BucketDirectory)

    with pytest.raises(IsDirectoryError):
        fs.read_bytes("d")


def test_open_missing(fs):
    with pytest.raises(NotFoundError):
        fs.open("missing")


def test_create_on_directory(fs):
    fs.mkdir("d")
    with pytest.raises(AlreadyExistsError):
        fs.create("d")
    with pytest.raises(AlreadyExistsError):
        fs.create("/")


def test_create_gives_uncommitted_handle(fs):
    f = fs.create("new.bin")
    assert isinstance(f, BucketFile)
    assert f.info.size == 0
    f.write(b"12345")
    assert not fs.exists("new.bin")
    f.close()
    assert f.info.size == 5
    assert fs.stat("new.bin").size == 5


def test_unclosed_write_is_never_visible(fs):
    f = fs.create("lost.bin")
    f.write(b"data")
    del f
    gc.collect()
    assert not fs.exists("lost.bin")


def test_exception_in_with_block_aborts(fs):
    with pytest.raises(RuntimeError):
        with fs.create("half.bin") as f:
            f.write(b"data")
            raise RuntimeError("stop")
    assert not fs.exists("half.bin")


def test_timeout(store, config):
    fs = BucketFs(store, FsConfig(timeout=0.05, scratch_dir=config.scratch_dir))
    store.delays["list_objects"] = 0.5
    with pytest.raises(StoreTimeoutError) as ei:
        fs.stat("anything")
    assert isinstance(ei.value, TimeoutError)


def test_mkdir_timeout_upload_lands_later(fs, store, config):
    timed = BucketFs(store, FsConfig(timeout=0.05, scratch_dir=config.scratch_dir))
    store.delays["put_object"] = 0.3
    with pytest.raises(StoreTimeoutError):
        timed.mkdir("slow")

    # брошенный вызов продолжает работать в фоне
    deadline = time.monotonic() + 5
    while not fs.exists("slow") and time.monotonic() < deadline:
        time.sleep(0.05)
    assert fs.is_dir("slow")


def test_prefix(store, config):
    fs = BucketFs(store, FsConfig(prefix="/tenant/", scratch_dir=config.scratch_dir))
    fs.write_bytes("a.txt", b"1")
    assert store.head_object("tenant/a.txt") is not None
    assert fs.listdir("") == ["a.txt"]
    assert fs.listdir("../..") == ["a.txt"]


def test_walk(fs):
    fs.write_bytes("r/a.txt", b"")
    fs.write_bytes("r/s/b.txt", b"")
    fs.makedirs("r/s/t")
    assert list(fs.walk("r")) == [
        ("r", ["s"], ["a.txt"]),
        ("r/s", ["t"], ["b.txt"]),
        ("r/s/t", [], []),
    ]


def test_exists_helpers(fs):
    fs.write_bytes("f", b"")
    fs.mkdir("d")
    assert fs.exists("f") and fs.is_file("f") and not fs.is_dir("f")
    assert fs.exists("d") and fs.is_dir("d") and not fs.is_file("d")
    assert not fs.exists("x") and not fs.is_file("x") and not fs.is_dir("x")
