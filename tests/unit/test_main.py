from pathlib import Path
from unittest.mock import patch

import pytest

from mathdoc.errors import ClassifiedError, ProcessingError, UploadError
from mathdoc.main import main, parse_args


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args(["paper.pdf"])
        assert args.file == Path("paper.pdf")
        assert args.formats is None
        assert args.page_range is None
        assert args.lines is False

    def test_repeated_formats(self) -> None:
        args = parse_args(["paper.pdf", "--format", "docx", "--format", "latex", "--lines"])
        assert args.formats == ["docx", "latex"]
        assert args.lines is True


class TestMain:
    def test_missing_file_returns_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = main([str(tmp_path / "missing.pdf")])
        assert exit_code == 1
        assert "cannot read" in capsys.readouterr().err

    def test_service_error_prints_suggestion(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        error = UploadError(
            "Document upload failed: HTTP 503",
            classification=ClassifiedError(
                user_message="unavailable",
                technical_detail="HTTP 503",
                is_retryable=True,
                suggested_action="Please wait a moment and try again",
            ),
        )
        with patch("mathdoc.main.run", side_effect=error):
            exit_code = main([str(tmp_path / "paper.pdf")])

        err = capsys.readouterr().err
        assert exit_code == 1
        assert "Error: unavailable" in err
        assert "HTTP 503" not in err
        assert "Suggestion: Please wait a moment and try again" in err

    def test_remote_failure_prints_service_message(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        error = ProcessingError("Processing failed: conversion timed out")
        with patch("mathdoc.main.run", side_effect=error):
            exit_code = main([str(tmp_path / "paper.pdf")])

        err = capsys.readouterr().err
        assert exit_code == 1
        assert "Error: Processing failed: conversion timed out" in err
        assert "Suggestion: Check the document and submit it again" in err
        assert "wait a moment" not in err

    def test_success_returns_zero(self, tmp_path: Path) -> None:
        async def _ok(*args, **kwargs) -> None:
            return None

        with patch("mathdoc.main.run", side_effect=_ok):
            assert main([str(tmp_path / "paper.pdf")]) == 0
