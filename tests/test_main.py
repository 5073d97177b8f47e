"""Tests for the terminal entry point."""

from unittest.mock import patch

import pytest

from pdojo.main import main


class TestMain:
    @pytest.mark.parametrize(
        "argv, message",
        [
            (["pdojo", "--source", "carrier-pigeon"], "Unknown pattern_source 'carrier-pigeon'"),
            (["pdojo", "--evaluator", "oracle"], "Unknown evaluator 'oracle'"),
        ],
    )
    def test_unknown_collaborator_prints_usage(self, mock_config, capsys, argv, message):
        with patch("sys.argv", argv), pytest.raises(SystemExit) as excinfo:
            main()

        assert excinfo.value.code == 2
        err = capsys.readouterr().err
        assert f"[pdojo] {message}" in err
        assert "[pdojo] Usage: pdojo" in err

    def test_quit_exits_cleanly(self, mock_config, capsys):
        with patch("sys.argv", ["pdojo"]), patch("builtins.input", side_effect=["quit"]):
            main()

        out = capsys.readouterr().out
        assert "Commands:" in out
        assert "[pdojo] Phase: active" in out
