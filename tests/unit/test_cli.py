from pathlib import Path

import pytest

from texbib.cli.main import main


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TEXBIB_ENCODING", "TEXBIB_TIMESTAMP_FORMAT", "TEXBIB_WRITE_HEADER", "TEXBIB_GERMAN"):
        monkeypatch.delenv(name, raising=False)


def _write_bib(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "refs.bib"
    path.write_text(text, encoding="utf-8")
    return path


VALID = """
@book{Knuth1984,
  author = {Donald E. Knuth},
  title = {The {\\TeX}book},
  year = 1984,
}
"""


def test_names_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["names", "Ludwig van Beethoven"]) == 0
    out = capsys.readouterr().out
    assert "Beethoven" in out
    assert "van" in out


def test_check_passes_valid_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", str(_write_bib(tmp_path, VALID))]) == 0
    assert "PASS" in capsys.readouterr().out


def test_check_fails_on_missing_fields(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_bib(tmp_path, "@article{Bare, title = {Only a title}}")

    assert main(["check", str(path)]) == 1
    out = capsys.readouterr().out
    assert "FAIL" in out
    assert "journaltitle" in out


def test_check_fails_on_parse_errors(tmp_path: Path) -> None:
    path = _write_bib(tmp_path, "@article{Bad, title {oops}}")
    assert main(["check", str(path)]) == 1


def test_list_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["list", str(_write_bib(tmp_path, VALID)), "--sort"]) == 0
    out = capsys.readouterr().out
    assert "Knuth1984" in out
    assert "1984" in out


def test_show_command_and_unknown_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_bib(tmp_path, VALID)

    assert main(["show", str(path), "Knuth1984", "--names", "firstlast"]) == 0
    assert "Donald E. Knuth" in capsys.readouterr().out

    assert main(["show", str(path), "Missing"]) == 1


def test_format_writes_output(tmp_path: Path) -> None:
    path = _write_bib(tmp_path, VALID)
    output = tmp_path / "formatted.bib"

    assert main(["format", str(path), "-o", str(output)]) == 0
    written = output.read_text(encoding="utf-8")
    assert written.startswith("% Encoding: UTF-8")
    assert "  year   = 1984," in written


def test_missing_file_exits_with_error(tmp_path: Path) -> None:
    assert main(["list", str(tmp_path / "nope.bib")]) == 1


def test_check_reports_undecodable_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "latin1.bib"
    path.write_bytes("@book{k, author = {Müller}, title = {T}, year = 2000}".encode("latin-1"))

    assert main(["check", str(path)]) == 1
    assert "FAIL" in capsys.readouterr().out
    assert main(["--encoding", "latin-1", "check", str(path)]) == 0
