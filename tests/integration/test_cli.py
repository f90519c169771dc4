"""
Integration tests for CLI.
"""

import io
import sys

import pytest
from conftest import FIXTURES, SCENARIO

import yn.config
from yn.cli import main, parse_args, read_input, select_lines
from yn.config import Config
from yn.errors import InputError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No user config file, no YN_* overrides, fresh cached config."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for key in ("YN_LINE_NUMBERS", "YN_GUTTER_SEPARATOR", "YN_COLOR_SYSTEM", "YN_MAX_FILE_SIZE"):
        monkeypatch.delenv(key, raising=False)
    yn.config._config = None
    yield
    yn.config._config = None


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "scenario.yaml"
    path.write_text(SCENARIO)
    return path


@pytest.fixture
def long_file(tmp_path):
    path = tmp_path / "long.yaml"
    path.write_text("".join(f"k{i}: {i}\n" for i in range(40)))
    return path


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.file is None
        assert args.query == ""
        assert args.line_numbers is None
        assert args.color is True
        assert args.output is False
        assert args.suggest is False
        assert args.match is None
        assert args.height == 24

    def test_short_flags(self):
        args = parse_args(["doc.yaml", "-q", "a.b", "-n", "-o", "-m", "2", "-v"])
        assert args.file == "doc.yaml"
        assert args.query == "a.b"
        assert args.line_numbers is True
        assert args.output is True
        assert args.match == 2
        assert args.verbose is True

    def test_no_color(self):
        assert parse_args(["--no-color"]).color is False


class TestReadInput:
    def test_file(self, scenario_file):
        assert read_input(str(scenario_file), Config()) == SCENARIO

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO(SCENARIO))
        assert read_input(None, Config()) == SCENARIO

    def test_empty(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("  \n")
        with pytest.raises(InputError, match="empty"):
            read_input(str(path), Config())

    def test_size_limit(self, scenario_file):
        config = Config()
        config.io.max_file_size = 4
        with pytest.raises(InputError, match="limit"):
            read_input(str(scenario_file), config)


class TestSelectLines:
    def test_window(self):
        assert select_lines("a\nb\nc\nd", 1, 2) == "b\nc"

    def test_past_end(self):
        assert select_lines("a\nb", 1, 10) == "b"


class TestMain:
    def test_plain_document(self, scenario_file, capsys):
        assert main([str(scenario_file), "--no-color"]) == 0
        assert capsys.readouterr().out == SCENARIO + "\n"

    def test_colored_document(self, scenario_file, capsys):
        assert main([str(scenario_file), "-q", "a.b"]) == 0
        assert "\x1b[" in capsys.readouterr().out

    def test_line_numbers(self, scenario_file, capsys):
        main([str(scenario_file), "--no-color", "-n"])
        assert capsys.readouterr().out.startswith("1 │ a:\n2 │   b: 1\n")

    def test_line_numbers_from_env(self, scenario_file, capsys, monkeypatch):
        monkeypatch.setenv("YN_LINE_NUMBERS", "true")
        main([str(scenario_file), "--no-color"])
        assert capsys.readouterr().out.startswith("1 │ a:")

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO(SCENARIO))
        assert main(["--no-color"]) == 0
        assert capsys.readouterr().out == SCENARIO + "\n"

    def test_output(self, capsys):
        assert main([str(FIXTURES / "multi.yaml"), "-q", "name", "-o"]) == 0
        assert capsys.readouterr().out == "name\n\nname: first\n---\nname: second\n"

    def test_output_nested(self, capsys):
        main([str(FIXTURES / "deployment.yaml"), "-q", "spec.template.spec.containers.1.args", "-o"])
        out = capsys.readouterr().out
        assert out == "spec.template.spec.containers.1.args\n\nargs:\n  - sleep\n  - infinity\n"

    def test_suggest(self, capsys):
        assert main([str(FIXTURES / "deployment.yaml"), "--suggest", "-q", "metadata"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "metadata",
            "metadata.labels",
            "metadata.labels.app",
            "metadata.labels.tier",
            "metadata.name",
        ]

    def test_suggest_all(self, scenario_file, capsys):
        main([str(scenario_file), "-s"])
        assert capsys.readouterr().out == "a\na.b\na.c\na.c.0\na.c.1\n"

    def test_no_match(self, scenario_file, capsys):
        assert main([str(scenario_file), "--no-color", "-q", "zzz"]) == 0
        captured = capsys.readouterr()
        assert "No match for 'zzz'" in captured.err
        assert captured.out == SCENARIO + "\n"

    def test_match_scrolls(self, long_file, capsys):
        assert main([str(long_file), "--no-color", "-q", "k30", "-m", "1", "--height", "10"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "k26: 26"
        assert len(lines) == 10

    def test_file_not_found(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.yaml")]) == 1
        assert "Error: File not found" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert main([str(path)]) == 1
        assert "Error reading input: input cannot be empty" in capsys.readouterr().err

    def test_oversized_file(self, scenario_file, capsys, monkeypatch):
        monkeypatch.setenv("YN_MAX_FILE_SIZE", "4")
        assert main([str(scenario_file)]) == 1
        assert "Error reading input" in capsys.readouterr().err

    def test_invalid_yaml(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("a: [1, 2\n")
        assert main([str(path)]) == 1
        assert "Error on parsing input" in capsys.readouterr().err

    def test_invalid_style(self, scenario_file, tmp_path, capsys):
        config_dir = tmp_path / "xdg" / "yn"
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('[styles.default]\nmap_key = "notacolor"\n')
        assert main([str(scenario_file)]) == 1
        assert "invalid style" in capsys.readouterr().err
