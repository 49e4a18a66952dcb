"""Tests for the persistent ignore store."""

import json
import logging
from pathlib import Path

import pytest

from gitlink.findings.fingerprint import fingerprint
from gitlink.findings.models import Finding
from gitlink.store import (
    IGNORE_FILENAME,
    IgnoreDatabase,
    IgnoredItem,
    IgnoreSource,
    IgnoreStore,
    ensure_gitignore_entry,
    extract_variable,
)


def _finding(line: int = 3, commit=None, content='api_key = "abcdefghij0123456789"') -> Finding:
    return Finding(
        secret_type="Generic API Key / Token",
        file="app.py",
        line=line,
        column=12,
        content=content,
        fingerprint=fingerprint("app.py", line, content, "Generic API Key / Token"),
        commit=commit,
    )


def _item(fp: str = "ab" * 32, **kwargs) -> IgnoredItem:
    return IgnoredItem(fingerprint=fp, short_id=fp[:8], variable="api_key", **kwargs)


class TestExtractVariable:
    @pytest.mark.parametrize("content, expected", [
        ('api_key = "abc"', "api_key"),
        ('const API_TOKEN="abc"', "API_TOKEN"),
        ('self.secret = os.environ["X"]', "secret"),
        ('export AWS_KEY=AKIA', "AWS_KEY"),
        ('a = b = "c"', "a"),
        ('"token": "abc"', "unknown"),
        ('= "orphan"', "unknown"),
        ("", "unknown"),
    ])
    def test_extract(self, content, expected):
        assert extract_variable(content) == expected


class TestIgnoredItem:
    def test_from_working_finding(self):
        f = _finding()
        item = IgnoredItem.from_finding(f)
        assert item.fingerprint == f.fingerprint
        assert item.short_id == f.fingerprint[:8]
        assert item.variable == "api_key"
        assert item.source == IgnoreSource.WORKING
        assert item.commit is None

    def test_from_history_finding(self):
        item = IgnoredItem.from_finding(_finding(commit="c0ffee" * 7))
        assert item.source == IgnoreSource.HISTORY
        assert item.commit == "c0ffee" * 7

    def test_dict_layout(self):
        item = IgnoredItem.from_finding(_finding(commit="abc123"))
        assert item.to_dict() == {
            "fingerprint": item.fingerprint,
            "short_id": item.short_id,
            "variable": "api_key",
            "source": "history",
            "commit": "abc123",
        }
        assert IgnoredItem.from_dict(item.to_dict()) == item


class TestIgnoreDatabase:
    def test_add_is_unique_per_fingerprint(self):
        db = IgnoreDatabase()
        assert db.add(_item()) is True
        assert db.add(_item("ab" * 32)) is False
        assert len(db) == 1

    def test_order_preserved(self):
        db = IgnoreDatabase()
        for fp in ("aa" * 32, "cc" * 32, "bb" * 32):
            db.add(_item(fp))
        assert [i.fingerprint[:2] for i in db] == ["aa", "cc", "bb"]

    def test_remove_by_short_id(self):
        db = IgnoreDatabase()
        db.add(_item("aa" * 32))
        db.add(_item("bb" * 32))
        assert db.remove_by_short_id("aaaaaaaa") is True
        assert db.remove_by_short_id("aaaaaaaa") is False
        assert [i.short_id for i in db] == ["bbbbbbbb"]

    def test_remove_at_most_one(self):
        # Two fingerprints sharing a short id prefix
        db = IgnoreDatabase()
        db.add(_item("12345678" + "a" * 56))
        db.add(_item("12345678" + "b" * 56))
        assert db.remove_by_short_id("12345678") is True
        assert len(db) == 1

    def test_clear_and_contains(self):
        db = IgnoreDatabase()
        db.add(_item())
        assert db.contains("ab" * 32)
        assert db.fingerprints == {"ab" * 32}
        db.clear()
        assert not db.contains("ab" * 32)
        assert len(db) == 0

    def test_filter(self):
        keep, drop = _finding(line=1), _finding(line=2)
        db = IgnoreDatabase()
        db.add(IgnoredItem.from_finding(drop))
        assert db.filter([keep, drop]) == [keep]

    def test_suppression_law(self):
        f = _finding()
        db = IgnoreDatabase()
        db.add(IgnoredItem.from_finding(f))
        assert db.filter([f]) == []
        db.remove_by_short_id(f.short_id)
        assert db.filter([f]) == [f]


class TestIgnoreStore:
    def test_missing_file_is_empty(self, tmp_path: Path):
        assert len(IgnoreStore(tmp_path).load()) == 0

    def test_save_and_load(self, tmp_path: Path):
        store = IgnoreStore(tmp_path)
        db = IgnoreDatabase()
        db.add(IgnoredItem.from_finding(_finding()))
        db.add(IgnoredItem.from_finding(_finding(line=9, commit="abc123")))
        store.save(db)

        loaded = store.load()
        assert loaded.items == db.items
        raw = json.loads((tmp_path / IGNORE_FILENAME).read_text())
        assert list(raw) == ["ignored"]
        assert raw["ignored"][1]["source"] == "history"
        assert raw["ignored"][0]["commit"] is None

    @pytest.mark.parametrize("text", [
        "{not json",
        "[]",
        '{"ignored": "nope"}',
        '{"ignored": [{"short_id": "x"}]}',
        '{"ignored": [{"fingerprint": "ab", "source": "elsewhere"}]}',
        '{"other": []}',
    ])
    def test_malformed_file_is_empty(self, tmp_path: Path, caplog, text):
        (tmp_path / IGNORE_FILENAME).write_text(text)
        with caplog.at_level(logging.WARNING, logger="gitlink"):
            db = IgnoreStore(tmp_path).load()
        assert len(db) == 0
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_duplicate_entries_collapsed_on_load(self, tmp_path: Path):
        entry = _item().to_dict()
        (tmp_path / IGNORE_FILENAME).write_text(json.dumps({"ignored": [entry, entry]}))
        assert len(IgnoreStore(tmp_path).load()) == 1

    def test_mutators(self, tmp_path: Path):
        store = IgnoreStore(tmp_path)
        assert store.add(_item("aa" * 32)) is True
        assert store.add(_item("aa" * 32)) is False
        assert store.add(_item("bb" * 32)) is True
        assert store.remove_by_short_id("aaaaaaaa") is True
        assert store.remove_by_short_id("aaaaaaaa") is False
        assert [i.short_id for i in store.load()] == ["bbbbbbbb"]
        store.clear()
        assert len(store.load()) == 0

    def test_save_adds_gitignore_entry_once(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text("*.pyc\n")
        store = IgnoreStore(tmp_path)
        store.add(_item("aa" * 32))
        store.add(_item("bb" * 32))
        text = (tmp_path / ".gitignore").read_text()
        assert text.startswith("*.pyc\n")
        assert [ln.strip() for ln in text.splitlines()].count(IGNORE_FILENAME) == 1


class TestGitignoreEntry:
    def test_creates_gitignore(self, tmp_path: Path):
        assert ensure_gitignore_entry(tmp_path) is True
        assert IGNORE_FILENAME in (tmp_path / ".gitignore").read_text().splitlines()

    def test_existing_entry_untouched(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text(f"  {IGNORE_FILENAME}  \n")
        assert ensure_gitignore_entry(tmp_path) is False
        assert (tmp_path / ".gitignore").read_text() == f"  {IGNORE_FILENAME}  \n"
