import pytest

from bucketfs.base.filestore.paths import base_name, normalize, parents, with_prefix

CASES = [
    ("", ""),
    (".", ""),
    ("/", ""),
    ("//", ""),
    (None, ""),
    ("a", "a"),
    ("/a/b/", "a/b"),
    ("a//b", "a/b"),
    ("a/./b", "a/b"),
    ("a/b/../c", "a/c"),
    ("../../x", "x"),
    ("/../a/..", ""),
    ("Reports/Q1.csv", "Reports/Q1.csv"),
]


@pytest.mark.parametrize("raw, expected", CASES)
def test_normalize(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", [raw for raw, _ in CASES] + ["a/../../b/./c//", "./.keep", "x/y/.."])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once
    assert not once.startswith("/")
    assert not once.endswith("/")


@pytest.mark.parametrize(
    "prefix, names, expected",
    [
        ("data", ("a/b",), "data/a/b"),
        ("", ("a",), "a"),
        ("data", ("",), "data"),
        ("", ("",), ""),
        ("/data/", ("a", ".keep"), "data/a/.keep"),
        ("data", ("../x",), "data/x"),
    ],
)
def test_with_prefix(prefix, names, expected):
    assert with_prefix(prefix, *names) == expected


def test_base_name():
    assert base_name("a/b/c.txt") == "c.txt"
    assert base_name("a/b/") == "b"
    assert base_name("a") == "a"


def test_parents():
    assert parents("a/b/c") == ["a", "a/b"]
    assert parents("/a//b/") == ["a"]
    assert parents("a") == []
    assert parents("") == []
