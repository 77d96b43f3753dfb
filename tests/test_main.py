"""Tests for the command line entry point."""

import logging
from unittest.mock import patch

import pytest

from dirtool.core.models import OperationKind
from dirtool.main import ExitCode, main, parse_arguments, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger(no_env_overrides):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    return str(tmp_path / "settings.json")


class TestParseArguments:

    def test_positional_arguments(self):
        args = parse_arguments(["diff", "src", "dest"])

        assert args.mode is OperationKind.DIFF
        assert (args.source, args.destination) == ("src", "dest")
        assert args.pool_size is None
        assert args.log_level is None

    def test_options(self):
        args = parse_arguments([
            "--thread-pool-size", "3", "--timeout", "2.5", "-v", "--log-file", "run.log",
            "COPY", "src", "dest",
        ])

        assert args.pool_size == 3
        assert args.task_timeout == 2.5
        assert args.log_level == "DEBUG"
        assert args.log_file == "run.log"


class TestMain:

    def test_copy(self, source_tree, destination, config_file):
        code = main(["-c", config_file, "COPY", str(source_tree), str(destination)])

        assert code == ExitCode.SUCCESS
        assert (destination / "sub" / "b.txt").read_text() == "bye"

    def test_diff_writes_report_to_stdout(self, source_tree, make_tree, destination, config_file, capsys):
        make_tree(destination, {"a.txt": "hi", "c.txt": "x"})

        code = main(["-c", config_file, "diff", str(source_tree), str(destination)])

        assert code == ExitCode.SUCCESS
        assert sorted(capsys.readouterr().out.splitlines()) == [
            "Directory only in source: sub",
            "Only in destination: c.txt",
            "Only in source: sub/b.txt",
        ]

    def test_logs_go_to_stderr(self, source_tree, destination, config_file, capsys):
        main(["-c", config_file, "--log-level", "INFO", "COPY", str(source_tree), str(destination)])

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "COPY finished" in captured.err

    def test_log_file(self, source_tree, destination, config_file, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        main(["-c", config_file, "--log-file", str(log_file), "COPY", str(source_tree), str(destination)])

        assert "COPY finished" in log_file.read_text(encoding="utf-8")

    @pytest.mark.parametrize("argv", [
        ["SYNC", "src", "dest"],
        ["--thread-pool-size", "many", "COPY", "src", "dest"],
        ["COPY", "src"],
    ])
    def test_argument_errors(self, argv, config_file):
        assert main(["-c", config_file] + argv) == ExitCode.ARGUMENT_ERROR

    def test_invalid_timeout(self, source_tree, destination, config_file):
        code = main(["-c", config_file, "--timeout", "0", "COPY", str(source_tree), str(destination)])

        assert code == ExitCode.ARGUMENT_ERROR
        assert not destination.exists()

    def test_expected_error(self, tmp_path, destination, config_file):
        code = main(["-c", config_file, "COPY", str(tmp_path / "missing"), str(destination)])
        assert code == ExitCode.EXPECTED_ERROR

    def test_move_into_own_source_is_rejected(self, source_tree, config_file):
        code = main(["-c", config_file, "MOVE", str(source_tree), str(source_tree / "out")])

        assert code == ExitCode.EXPECTED_ERROR
        assert (source_tree / "a.txt").read_text() == "hi"
        assert not (source_tree / "out").exists()

    def test_unexpected_error(self, source_tree, destination, config_file, capsys):
        with patch('dirtool.main.DirectoryOperation.process', side_effect=RuntimeError("boom")):
            code = main(["-c", config_file, "COPY", str(source_tree), str(destination)])

        assert code == ExitCode.UNEXPECTED_ERROR
        assert "boom" in capsys.readouterr().err


class TestSetupLogging:

    def test_console_handler_and_level(self):
        import sys

        root = setup_logging("warning")

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_unknown_level_defaults_to_info(self):
        assert setup_logging("chatty").level == logging.INFO
