"""Tests for the gridengine command-line shell."""

import io

import pytest

from gridengine import GridEngine
from gridengine.cli import CommandError, GridShell, format_record, main


@pytest.fixture
def shell():
    return GridShell(GridEngine(4, 2), out=io.StringIO(), show_grid=False)


def output(shell: GridShell) -> str:
    return shell.out.getvalue()


class TestGridShell:
    """Command parsing and execution."""

    def test_add_and_move(self, shell):
        shell.execute("add a 0 0 2 1")
        shell.execute("add b 0 0 2 1")
        shell.execute("mv a 2 0")

        assert shell.engine.get_item("a").position == (2, 0)
        assert shell.engine.get_item("b").position == (2, 1)
        assert "move: 2 change(s)" in output(shell)

    def test_resize_and_remove(self, shell):
        shell.execute("add a 0 0 1 1")
        shell.execute("resize a 2 2")
        shell.execute("rm a")

        assert "a" not in shell.engine
        assert "1x1 -> 2x2" in output(shell)

    def test_queries(self, shell):
        shell.execute("add a 1 0 1 1")
        shell.execute("get a")
        shell.execute("at 1 0")
        shell.execute("at 0 0")
        shell.execute("list")

        text = output(shell)
        assert "a: (1, 0) size 1x1" in text
        assert "(empty)" in text

    def test_comments_and_blank_lines(self, shell):
        assert shell.execute("") is True
        assert shell.execute("# just a comment") is True

    def test_quit(self, shell):
        assert shell.execute("quit") is False

    @pytest.mark.parametrize("line", [
        "bogus",
        "add a 0 0",
        "add a 0 zero 1 1",
        "mv",
        "rm",
        "add 'unterminated",
    ])
    def test_malformed_commands(self, shell, line):
        with pytest.raises(CommandError):
            shell.execute(line)

    def test_show_grid_after_mutation(self):
        shell = GridShell(GridEngine(2, 1), out=io.StringIO())
        shell.execute("add a 0 0 1 1")
        assert "00[a][ ]" in output(shell)


class TestFormatRecord:

    def test_add_line(self):
        engine = GridEngine(4, 2)
        records = []
        engine.events.add_changes_listener(records.append)
        engine.add_item("a", 1, 0, 2, 1)

        assert format_record(records[0]) == "add: 1 change(s)\n  add    a at (1, 0) size 2x1"


class TestMain:
    """Entry point behavior."""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_run_script(self, tmp_path, capsys):
        script = tmp_path / "layout.txt"
        script.write_text("add a 0 0 2 1\nadd b 0 0 2 1\nmv a 2 0\n")

        assert main(["run", str(script), "--width", "4", "--height", "2", "-q"]) == 0

        out = capsys.readouterr().out
        assert "00[ ][ ][a][a]" in out
        assert "01[ ][ ][b][b]" in out

    def test_run_stops_on_error(self, tmp_path, capsys):
        script = tmp_path / "layout.txt"
        script.write_text("add a 0 0 1 1\nmv missing 0 0\nadd b 0 0 1 1\n")

        assert main(["run", str(script)]) == 1
        assert "Error on line 2: Item not found: missing" in capsys.readouterr().out

    def test_run_missing_script(self, tmp_path, capsys):
        assert main(["run", str(tmp_path / "nope.txt")]) == 1

    def test_run_with_config(self, tmp_path, capsys):
        config = tmp_path / "grid.yaml"
        config.write_text("width: 2\nheight: 1\nmax_height: 1\n")
        script = tmp_path / "layout.txt"
        script.write_text("add a 0 0 2 1\nadd b 0 0 1 1\n")

        assert main(["run", str(script), "--config", str(config)]) == 1
        assert "Grid full" in capsys.readouterr().out

    def test_bad_config(self, tmp_path, capsys):
        script = tmp_path / "layout.txt"
        script.write_text("")

        assert main(["run", str(script), "--width", "0"]) == 1
        assert "width must be a positive integer" in capsys.readouterr().out

    def test_shell_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("add a 0 0 1 1\nbogus\nquit\nadd b 0 0 1 1\n"))

        assert main(["shell", "--width", "3", "--height", "1"]) == 0

        out = capsys.readouterr().out
        assert "Grid 3x1" in out
        assert "add: 1 change(s)" in out
        assert "Error: Unknown command: bogus" in out
        assert "  add    b" not in out
