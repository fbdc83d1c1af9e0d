import io
import os

import pytest

from pipeshell import ExecutableIndex, ExitRequest, Shell
from pipeshell.shell.registry import CommandRegistry


class Session:
    def __init__(self, shell: Shell, out: io.BytesIO, err: io.BytesIO) -> None:
        self.shell = shell
        self.out = out
        self.err = err

    def run(self, line: str):
        self.out.seek(0)
        self.out.truncate()
        self.err.seek(0)
        self.err.truncate()
        return self.shell.execute(line)

    @property
    def stdout(self) -> str:
        return self.out.getvalue().decode()

    @property
    def stderr(self) -> str:
        return self.err.getvalue().decode()


@pytest.fixture
def session(tmp_path) -> Session:
    out, err = io.BytesIO(), io.BytesIO()
    shell = Shell(
        cwd=str(tmp_path),
        home=str(tmp_path),
        executables=ExecutableIndex({"mytool": "/opt/bin/mytool"}),
        stdout=out,
        stderr=err,
    )
    return Session(shell, out, err)


def test_echo_joins_arguments(session):
    result = session.run("echo  a   b")
    assert session.stdout == "a b\n"
    assert result.exit_code == 0


def test_echo_preserves_quoted_spacing(session):
    session.run("echo 'hello    world' \"x  y\"")
    assert session.stdout == "hello    world x  y\n"


def test_echo_dash_n_omits_newline(session):
    session.run("echo -n no newline")
    assert session.stdout == "no newline"


def test_builtin_names_are_case_insensitive(session):
    session.run("ECHO hi")
    assert session.stdout == "hi\n"


def test_pwd_reports_cwd(session, tmp_path):
    session.run("pwd")
    assert session.stdout == f"{tmp_path}\n"


def test_cd_and_pwd(session, tmp_path):
    (tmp_path / "work" / "nested").mkdir(parents=True)
    session.run("cd work/nested")
    session.run("pwd")
    assert session.stdout == f"{tmp_path / 'work' / 'nested'}\n"

    session.run("cd ..")
    assert session.shell.cwd == str(tmp_path / "work")
    session.run("cd ./nested")
    assert session.shell.cwd == str(tmp_path / "work" / "nested")
    session.run("cd ../../")
    assert session.shell.cwd == str(tmp_path)


def test_cd_without_argument_goes_home(session, tmp_path):
    (tmp_path / "elsewhere").mkdir()
    session.run("cd elsewhere")
    session.run("cd")
    assert session.shell.cwd == str(tmp_path)


def test_cd_missing_directory_leaves_cwd(session, tmp_path):
    missing = tmp_path / "nonexistent"
    result = session.run(f"cd {missing}")
    assert session.stderr == f"cd: {missing}: No such file or directory\n"
    assert result.exit_code == 1
    session.run("pwd")
    assert session.stdout == f"{tmp_path}\n"


def test_cd_to_file_is_rejected(session, tmp_path):
    (tmp_path / "file.txt").write_text("x")
    result = session.run("cd file.txt")
    assert session.stderr == "cd: file.txt: Not a directory\n"
    assert result.exit_code == 1
    assert session.shell.cwd == str(tmp_path)


def test_cd_rejects_extra_arguments(session, tmp_path):
    (tmp_path / "a").mkdir()
    result = session.run("cd a b")
    assert session.stderr == "cd: too many arguments\n"
    assert result.exit_code == 1
    assert session.shell.cwd == str(tmp_path)


def test_type_reports_builtins_and_executables(session):
    result = session.run("type echo mytool nosuchthing")
    assert session.stdout == "echo is a shell builtin\nmytool is /opt/bin/mytool\n"
    assert session.stderr == "nosuchthing: not found\n"
    assert result.exit_code == 1


def test_unknown_command(session):
    result = session.run("unknowncmd123 --flag")
    assert session.stderr == "unknowncmd123: command not found\n"
    assert result.exit_code == 127


def test_exit_is_a_control_signal(session):
    result = session.run("exit")
    assert result.exit_request == ExitRequest(0)
    assert result.exit_code == 0


def test_exit_stops_later_stages(session):
    result = session.run("exit | echo later")
    assert result.exit_request is not None
    assert len(result.statuses) == 1
    assert session.stdout == ""


def test_history_lists_numbered_entries(session):
    session.run("echo a")
    session.run("echo b")
    session.run("history")
    assert session.stdout == "    1  echo a\n    2  echo b\n    3  history\n"


def test_history_with_count(session):
    for line in ("echo a", "echo b", "echo c"):
        session.run(line)
    session.run("history 2")
    assert session.stdout == "    3  echo c\n    4  history 2\n"


def test_history_count_larger_than_history(session):
    session.run("echo a")
    session.run("history 50")
    assert session.stdout == "    1  echo a\n    2  history 50\n"


def test_history_requires_numeric_argument(session):
    result = session.run("history many")
    assert session.stderr == "history: many: numeric argument required\n"
    assert result.exit_code == 2


def test_history_append_round_trip(session, tmp_path):
    session.run("echo one")
    session.run("history -a hist.txt")
    session.run("echo two")
    session.run("echo three")
    session.run("history -a hist.txt")

    assert (tmp_path / "hist.txt").read_text().splitlines() == [
        "echo one",
        "history -a hist.txt",
        "echo two",
        "echo three",
        "history -a hist.txt",
    ]


def test_history_write_and_read(session, tmp_path):
    (tmp_path / "old.txt").write_text("ls\n\npwd\n")
    session.run("history -r old.txt")
    session.run("history -w all.txt")
    assert (tmp_path / "all.txt").read_text() == "history -r old.txt\nls\npwd\nhistory -w all.txt\n"


def test_history_file_option_requires_path(session):
    result = session.run("history -a")
    assert session.stderr == "history: -a: option requires an argument\n"
    assert result.exit_code == 2


def test_history_read_missing_file(session):
    result = session.run("history -r missing.txt")
    assert session.stderr == "history: missing.txt: No such file or directory\n"
    assert result.exit_code == 1


def test_blank_line_is_not_recorded(session):
    result = session.run("   ")
    assert result.statuses == []
    assert len(session.shell.history) == 0


def test_syntax_error_on_empty_stage(session):
    result = session.run("echo hi |")
    assert session.stderr == "pipeshell: syntax error near unexpected token '|'\n"
    assert result.exit_code == 2
    assert session.stdout == ""


def test_redirect_only_stage_is_rejected(session):
    result = session.run("> out.txt")
    assert "pipeshell:" in session.stderr
    assert result.exit_code == 2


def test_builtin_output_redirect(session, tmp_path):
    session.run("echo first > out.txt")
    session.run("echo second 1>> out.txt")
    assert (tmp_path / "out.txt").read_text() == "first\nsecond\n"
    assert session.stdout == ""


def test_builtin_error_redirect(session, tmp_path):
    session.run("cd nowhere 2> err.txt")
    assert session.stderr == ""
    assert (tmp_path / "err.txt").read_text() == "cd: nowhere: No such file or directory\n"
    session.run("type nothing 2>> err.txt")
    assert (tmp_path / "err.txt").read_text().splitlines()[-1] == "nothing: not found"


def test_redirect_target_that_cannot_be_opened(session, tmp_path):
    result = session.run("echo hi > missing_dir/out.txt")
    assert session.stderr == "pipeshell: missing_dir/out.txt: No such file or directory\n"
    assert result.exit_code == 1
    assert not (tmp_path / "missing_dir").exists()


def test_redirect_target_with_nul_byte_is_reported(session):
    result = session.run("echo hi > 'bad\0name'")
    assert session.stderr == "pipeshell: bad\0name: embedded null byte\n"
    assert session.stdout == ""
    assert result.exit_code == 1


def test_builtin_without_handler(tmp_path):
    out, err = io.BytesIO(), io.BytesIO()
    shell = Shell(
        cwd=str(tmp_path),
        executables=ExecutableIndex(),
        stdout=out,
        stderr=err,
        registry=CommandRegistry(),
    )
    result = shell.execute("echo hi")
    assert err.getvalue() == b"echo: no handler for builtin\n"
    assert result.exit_code == 1


def test_registry_rejects_names_outside_builtin_set():
    registry = CommandRegistry()
    with pytest.raises(ValueError):
        registry.register("ls", lambda ctx, args: 0)


def test_load_and_flush_history(tmp_path):
    histfile = tmp_path / "hist"
    histfile.write_text("echo old\n")
    shell = Shell(cwd=str(tmp_path), executables=ExecutableIndex(), stdout=io.BytesIO(), stderr=io.BytesIO())
    shell.load_history(str(histfile))
    shell.execute("echo new")
    shell.flush_history(str(histfile))
    shell.flush_history(str(histfile))
    assert histfile.read_text() == "echo old\necho new\n"
    assert shell.history.entries() == ["echo old", "echo new"]


def test_default_executable_index_uses_search_path(tmp_path):
    shell = Shell(cwd=str(tmp_path), stdout=io.BytesIO(), stderr=io.BytesIO())
    assert "echo" in shell.available_commands()
    assert os.path.basename(shell.state.executables.resolve("sh") or "") == "sh"
