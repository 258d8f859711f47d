import pytest

from minigit.objects import Commit, compute_hash


def test_hash_of_empty_content_is_offset_basis():
    assert compute_hash("") == f"{14695981039346656037:016x}"


def test_hash_known_vector():
    assert compute_hash("a") == "af63dc4c8601ec8c"


def test_hash_text_and_bytes_agree():
    assert compute_hash("hello world") == compute_hash(b"hello world")


@pytest.mark.parametrize("content", ["", "x", "some longer content\n", b"\xff\x80\x00"])
def test_hash_is_sixteen_lowercase_hex_digits(content):
    digest = compute_hash(content)
    assert len(digest) == 16
    assert set(digest) <= set("0123456789abcdef")


def test_hash_is_deterministic_and_content_sensitive():
    assert compute_hash("abc") == compute_hash("abc")
    assert compute_hash("abc") != compute_hash("abd")


def test_high_bytes_hash_differently_from_low_bytes():
    assert compute_hash(b"\x80") != compute_hash(b"\x00")


def test_to_text_layout():
    commit = Commit(
        "h",
        "msg",
        "Mon Jan  1 00:00:00 2024",
        ["p1", "p2"],
        {"b.txt": "222", "a.txt": "111"},
    )
    assert commit.to_text() == (
        "msg\nMon Jan  1 00:00:00 2024\np1\np2\n---\na.txt:111\nb.txt:222\n"
    )


def test_to_text_without_parents_or_files():
    commit = Commit("h", "Initial commit", "ts")
    assert commit.to_text() == "Initial commit\nts\n---\n"


def test_round_trip():
    commit = Commit("abc", "change", "Tue Feb  2 10:00:00 2021", ["p"], {"f": "1", "g": "2"})
    assert Commit.from_text("abc", commit.to_text()) == commit


def test_from_text_skips_lines_without_colon():
    parsed = Commit.from_text("h", "m\nt\n---\nnocolon\nf:1\n")
    assert parsed.files == {"f": "1"}
    assert parsed.parents == []


def test_from_text_splits_on_first_colon():
    parsed = Commit.from_text("h", "m\nt\n---\nname:a:b\n")
    assert parsed.files == {"name": "a:b"}


def test_from_text_of_empty_text():
    parsed = Commit.from_text("h", "")
    assert parsed == Commit("h", "", "", [], {})