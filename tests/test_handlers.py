"""Tests for the per-operation entry handlers and post-processors."""

import errno
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dirtool.core.errors import ComparisonError
from dirtool.core.models import OperationKind
from dirtool.core.operation.handlers import (
    STRATEGIES,
    OperationContext,
    copy_entry,
    diff_entry,
    move_entry,
    no_post_process,
    remove_moved_source,
    report_destination_only,
    strategy_for,
)
from dirtool.services.report import DiffReport


@pytest.fixture
def context():
    return OperationContext(report=DiffReport(echo=False))


class TestCopyEntry:

    def test_creates_directory_idempotently(self, context, source_tree, destination):
        target = destination / "sub"

        copy_entry(context, source_tree / "sub", target, Path("sub"))
        copy_entry(context, source_tree / "sub", target, Path("sub"))

        assert target.is_dir()

    def test_copies_file_creating_parent(self, context, source_tree, destination):
        target = destination / "sub" / "b.txt"

        copy_entry(context, source_tree / "sub" / "b.txt", target, Path("sub/b.txt"))

        assert target.read_text() == "bye"
        assert (source_tree / "sub" / "b.txt").read_text() == "bye"

    def test_overwrites_existing_file(self, context, source_tree, destination):
        destination.mkdir()
        (destination / "a.txt").write_text("old")

        copy_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))

        assert (destination / "a.txt").read_text() == "hi"


class TestMoveEntry:

    def test_moves_file(self, context, source_tree, destination):
        target = destination / "sub" / "b.txt"

        move_entry(context, source_tree / "sub" / "b.txt", target, Path("sub/b.txt"))

        assert target.read_text() == "bye"
        assert not (source_tree / "sub" / "b.txt").exists()

    def test_overwrites_existing_file(self, context, source_tree, destination):
        destination.mkdir()
        (destination / "a.txt").write_text("old")

        move_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))

        assert (destination / "a.txt").read_text() == "hi"

    def test_directory_is_created_not_moved(self, context, source_tree, destination):
        move_entry(context, source_tree / "sub", destination / "sub", Path("sub"))

        assert (destination / "sub").is_dir()
        assert (source_tree / "sub" / "b.txt").exists()

    def test_falls_back_across_file_systems(self, context, source_tree, destination):
        cross_device = OSError(errno.EXDEV, "Invalid cross-device link")

        with patch('dirtool.core.operation.handlers.os.replace', side_effect=cross_device):
            move_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))

        assert (destination / "a.txt").read_text() == "hi"
        assert not (source_tree / "a.txt").exists()

    def test_other_errors_propagate(self, context, source_tree, destination):
        denied = PermissionError(errno.EACCES, "Permission denied")

        with patch('dirtool.core.operation.handlers.os.replace', side_effect=denied):
            with pytest.raises(PermissionError):
                move_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))

        assert (source_tree / "a.txt").exists()


class TestDiffEntry:

    def test_file_only_in_source(self, context, source_tree, destination):
        destination.mkdir()
        diff_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))
        assert context.report.lines == ["Only in source: a.txt"]

    def test_directory_only_in_source(self, context, source_tree, destination):
        destination.mkdir()
        diff_entry(context, source_tree / "sub", destination / "sub", Path("sub"))
        assert context.report.lines == ["Directory only in source: sub"]

    def test_identical_file_reports_nothing(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "hi"})
        diff_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))
        assert context.report.lines == []

    def test_different_file(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "ho"})
        diff_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))
        assert context.report.lines == ["Different: a.txt"]

    def test_directory_versus_file(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"sub": "not a directory"})
        diff_entry(context, source_tree / "sub", destination / "sub", Path("sub"))
        assert context.report.lines == ["Different: sub (directory vs file)"]

    def test_file_versus_directory(self, context, source_tree, destination):
        (destination / "a.txt").mkdir(parents=True)
        diff_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))
        assert context.report.lines == ["Different: a.txt (file vs directory)"]

    def test_never_mutates(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "ho"})
        diff_entry(context, source_tree / "sub" / "b.txt", destination / "sub" / "b.txt", Path("sub/b.txt"))

        assert not (destination / "sub").exists()
        assert (destination / "a.txt").read_text() == "ho"

    def test_unreadable_file(self, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "hi"})
        comparator = MagicMock()
        comparator.equal.side_effect = PermissionError("denied")
        context = OperationContext(report=DiffReport(echo=False), comparator=comparator)

        with pytest.raises(ComparisonError) as exc_info:
            diff_entry(context, source_tree / "a.txt", destination / "a.txt", Path("a.txt"))

        assert exc_info.value.path == Path("a.txt")
        assert isinstance(exc_info.value.__cause__, PermissionError)


class TestRemoveMovedSource:

    def test_removes_emptied_tree_and_root(self, context, source_tree, destination):
        (source_tree / "a.txt").unlink()
        (source_tree / "sub" / "b.txt").unlink()

        remove_moved_source(context, source_tree, destination)

        assert not source_tree.exists()
        assert context.cleanup_failures == []

    def test_removes_leftover_files(self, context, source_tree, destination):
        remove_moved_source(context, source_tree, destination)

        assert not source_tree.exists()

    def test_failures_are_recorded_not_raised(self, context, source_tree, destination):
        (source_tree / "a.txt").unlink()
        (source_tree / "sub" / "b.txt").unlink()

        with patch.object(Path, 'rmdir', side_effect=OSError("Directory busy")):
            remove_moved_source(context, source_tree, destination)

        failed = [path for path, _ in context.cleanup_failures]
        assert str(source_tree) in failed
        assert str(source_tree / "sub") in failed

    def test_missing_source_is_recorded(self, context, tmp_path, destination):
        remove_moved_source(context, tmp_path / "gone", destination)
        assert len(context.cleanup_failures) == 1


class TestReportDestinationOnly:

    def test_reports_destination_only_entries(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "hi", "c.txt": "x", "extra/d.txt": "y"})

        report_destination_only(context, source_tree, destination)

        assert sorted(context.report.lines) == [
            "Directory only in destination: extra",
            "Only in destination: c.txt",
            "Only in destination: extra/d.txt",
        ]

    def test_nothing_when_destination_is_a_subset(self, context, source_tree, make_tree, destination):
        make_tree(destination, {"a.txt": "different", "sub/b.txt": "bye"})

        report_destination_only(context, source_tree, destination)

        assert context.report.lines == []


class TestStrategies:

    def test_every_kind_has_a_strategy(self):
        assert set(STRATEGIES) == set(OperationKind)

    @pytest.mark.parametrize("kind,handler,post_processor", [
        (OperationKind.COPY, copy_entry, no_post_process),
        (OperationKind.MOVE, move_entry, remove_moved_source),
        (OperationKind.DIFF, diff_entry, report_destination_only),
    ])
    def test_strategy_for(self, kind, handler, post_processor):
        strategy = strategy_for(kind)
        assert strategy.handle_entry is handler
        assert strategy.post_process is post_processor

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            strategy_for("COPY")
