"""
Tests for the retention manager and the CI housekeeping plan

Creation times cannot be set portably, so the manager is given mtime as its
timestamp and files are aged with os.utime.
"""

import os
from pathlib import Path

import pytest

from logix_cicd.core.config import Settings
from logix_cicd.core.exceptions import ResourceNotFoundError, ValidationError
from logix_cicd.housekeeping.plan import build_retention_plan
from logix_cicd.housekeeping.retention import RetentionManager, RetentionRule

BASE_TIME = 1_700_000_000


def _mtime(path: Path) -> float:
    return path.stat().st_mtime


def _make_files(directory: Path, names_by_age: list[str]) -> list[Path]:
    """Create files; the first name is the newest"""
    paths = []
    for age, name in enumerate(names_by_age):
        path = directory / name
        path.write_text(name, encoding="utf-8")
        stamp = BASE_TIME - age * 60
        os.utime(path, (stamp, stamp))
        paths.append(path)
    return paths


@pytest.fixture
def manager():
    return RetentionManager(timestamp=_mtime)


class TestRetainMostRecent:
    """Test retention in a single folder"""

    def test_keeps_newest(self, tmp_path, manager):
        """Test the K newest files survive and the rest are deleted"""
        names = [f"report_{i}.txt" for i in range(7)]
        _make_files(tmp_path, names)

        report = manager.retain_most_recent(tmp_path, 5, ".txt")

        assert [p.name for p in report.retained] == names[:5]
        assert [p.name for p in report.deleted] == names[5:]
        assert sorted(p.name for p in tmp_path.iterdir()) == sorted(names[:5])
        assert report.succeeded is True

    def test_fewer_files_than_keep(self, tmp_path, manager):
        """Test nothing is deleted when there are at most K files"""
        _make_files(tmp_path, ["a.txt", "b.txt"])

        report = manager.retain_most_recent(tmp_path, 5, ".txt")

        assert len(report.retained) == 2
        assert report.deleted == []

    def test_idempotent(self, tmp_path, manager):
        """Test a second run deletes nothing"""
        _make_files(tmp_path, [f"r{i}.txt" for i in range(4)])

        manager.retain_most_recent(tmp_path, 2, ".txt")
        second = manager.retain_most_recent(tmp_path, 2, ".txt")

        assert second.deleted == []
        assert len(second.retained) == 2

    def test_keep_zero_deletes_only_that_extension(self, tmp_path, manager):
        """Test K=0 removes every matching file and nothing else"""
        _make_files(tmp_path, ["one.BAK", "two.bak", "project.ACD", "notes.txt"])

        report = manager.retain_most_recent(tmp_path, 0, ".BAK")

        assert report.retained == []
        assert sorted(p.name for p in report.deleted) == ["one.BAK", "two.bak"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["notes.txt", "project.ACD"]

    def test_extension_match_case_insensitive(self, tmp_path, manager):
        """Test '.L5X' matches '.l5x' files"""
        _make_files(tmp_path, ["new.l5x", "old.L5X"])

        report = manager.retain_most_recent(tmp_path, 1, ".L5X")

        assert [p.name for p in report.retained] == ["new.l5x"]
        assert [p.name for p in report.deleted] == ["old.L5X"]

    def test_not_recursive(self, tmp_path, manager):
        """Test files in subfolders are never touched"""
        nested = tmp_path / "nested"
        nested.mkdir()
        _make_files(nested, ["deep.txt"])
        _make_files(tmp_path, ["top.txt"])

        manager.retain_most_recent(tmp_path, 0, ".txt")

        assert (nested / "deep.txt").exists()
        assert not (tmp_path / "top.txt").exists()

    def test_ties_broken_by_name(self, tmp_path, manager):
        """Test files with the same timestamp are ranked by name"""
        for name in ["c.txt", "a.txt", "b.txt"]:
            path = tmp_path / name
            path.write_text(name, encoding="utf-8")
            os.utime(path, (BASE_TIME, BASE_TIME))

        report = manager.retain_most_recent(tmp_path, 2, ".txt")

        assert [p.name for p in report.retained] == ["a.txt", "b.txt"]
        assert [p.name for p in report.deleted] == ["c.txt"]

    def test_deletion_error_is_isolated(self, tmp_path, manager, monkeypatch):
        """Test one failed deletion is reported and the others still happen"""
        paths = _make_files(tmp_path, ["keep.txt", "locked.txt", "old.txt"])
        real_remove = os.remove

        def fake_remove(path):
            if Path(path).name == "locked.txt":
                raise PermissionError("file is in use")
            real_remove(path)

        monkeypatch.setattr(os, "remove", fake_remove)

        report = manager.retain_most_recent(tmp_path, 1, ".txt")

        assert report.succeeded is False
        assert "file is in use" in report.errors[paths[1]]
        assert report.deleted == [paths[2]]
        assert paths[1].exists()

    def test_missing_directory(self, tmp_path, manager):
        """Test a missing folder raises ResourceNotFoundError"""
        with pytest.raises(ResourceNotFoundError, match="Folder not found"):
            manager.retain_most_recent(tmp_path / "missing", 5, ".txt")

    @pytest.mark.parametrize("extension", ["txt", ".", ""])
    def test_invalid_extension(self, tmp_path, manager, extension):
        """Test an extension without a leading '.' is rejected"""
        with pytest.raises(ValidationError):
            manager.retain_most_recent(tmp_path, 5, extension)

    def test_negative_keep(self, tmp_path, manager):
        """Test a negative count is rejected"""
        with pytest.raises(ValidationError):
            manager.retain_most_recent(tmp_path, -1, ".txt")

    def test_reporter_messages(self, tmp_path, reporter):
        """Test each decision is printed through the reporter"""
        _make_files(tmp_path, ["new.txt", "old.txt"])
        manager = RetentionManager(reporter=reporter, timestamp=_mtime)

        manager.retain_most_recent(tmp_path, 1, ".txt")

        output = reporter.console.file.getvalue()
        assert "Retained 'new.txt'" in output
        assert "Deleted 'old.txt'" in output


class TestRetentionPlan:
    """Test the CI housekeeping plan"""

    def test_plan_rules(self, tmp_path):
        """Test the plan covers reports and generated project files"""
        rules = build_retention_plan(tmp_path, Settings())

        summary = [(rule.directory.relative_to(tmp_path).as_posix(), rule.extension, rule.keep) for rule in rules]
        assert summary == [
            ("4-test-reports/textreports", ".txt", 5),
            ("4-test-reports/excelreports", ".xlsx", 5),
            ("3-cicd-config/ci-teststage/X_GeneratedFiles", ".L5X", 5),
            ("3-cicd-config/ci-teststage/X_GeneratedFiles", ".ACD", 5),
            ("3-cicd-config/ci-teststage/X_GeneratedFiles", ".BAK", 0),
        ]

    def test_plan_uses_settings(self, tmp_path):
        """Test retention counts come from settings"""
        rules = build_retention_plan(tmp_path, Settings(text_reports_to_retain=10))

        assert rules[0].keep == 10

    def test_apply_skips_missing_folder(self, tmp_path, manager):
        """Test a missing folder does not stop the remaining rules"""
        present = tmp_path / "present"
        present.mkdir()
        _make_files(present, ["a.txt", "b.txt"])

        reports = manager.apply(
            [
                RetentionRule(tmp_path / "missing", 1, ".txt"),
                RetentionRule(present, 1, ".txt"),
            ]
        )

        assert len(reports) == 1
        assert [p.name for p in reports[0].deleted] == ["b.txt"]
