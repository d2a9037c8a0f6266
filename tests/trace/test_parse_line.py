"""Pytest tests for the strace line grammar and Event parsing."""

import pyparsing as pp
import pytest

from fdtrace.trace.parse import parse_event, parse_trace
from fdtrace.trace.parser_defs import parse_line


# --- Test Functions for Successful Parsing ---


def test_parse_openat_with_flags():
    """Arguments come back as raw text, quotes and all."""
    line = 'openat(AT_FDCWD, "/etc/ld.so.cache", O_RDONLY|O_CLOEXEC) = 3'
    event = parse_event(line, 7)
    assert event.syscall == "openat"
    assert event.args == ("AT_FDCWD", '"/etc/ld.so.cache"', "O_RDONLY|O_CLOEXEC")
    assert event.result == "3"
    assert event.line_no == 7
    assert event.pid is None


def test_parse_keeps_escapes_in_paths():
    line = 'openat(AT_FDCWD, "\\x2f\\x65\\x74\\x63", O_RDONLY) = 3'
    event = parse_event(line)
    assert event.args[1] == '"\\x2f\\x65\\x74\\x63"'


def test_parse_openat_with_mode():
    line = 'openat(AT_FDCWD, "/dev/null", O_WRONLY|O_CREAT|O_TRUNC, 0666) = 3'
    event = parse_event(line)
    assert event.args == (
        "AT_FDCWD",
        '"/dev/null"',
        "O_WRONLY|O_CREAT|O_TRUNC",
        "0666",
    )


def test_parse_comma_inside_string():
    line = 'write(1, "hello, world\\n", 13) = 13'
    event = parse_event(line)
    assert event.args == ("1", '"hello, world\\n"', "13")
    assert event.result == "13"


def test_parse_escaped_quote_inside_string():
    line = 'read(3, "say \\"hi\\", ok", 64) = 13'
    event = parse_event(line)
    assert event.args == ("3", '"say \\"hi\\", ok"', "64")


def test_parse_truncated_string():
    line = 'read(3, "\\177ELF\\2\\1\\1"..., 832) = 832'
    event = parse_event(line)
    assert event.args == ("3", '"\\177ELF\\2\\1\\1"...', "832")


def test_parse_pipe_array_is_one_argument():
    event = parse_event("pipe2([3, 4], O_CLOEXEC) = 0")
    assert event.args == ("[3, 4]", "O_CLOEXEC")
    assert event.result == "0"


def test_parse_struct_is_one_argument():
    line = "fstat(3, {st_mode=S_IFREG|0644, st_size=212, ...}) = 0"
    event = parse_event(line)
    assert event.args == ("3", "{st_mode=S_IFREG|0644, st_size=212, ...}")


def test_parse_nested_call_and_comment():
    line = 'execve("/bin/ls", ["ls", "-l"], 0x7ffd2c8 /* 20 vars */) = 0'
    event = parse_event(line)
    assert event.args == ('"/bin/ls"', '["ls", "-l"]', "0x7ffd2c8 /* 20 vars */")


def test_parse_socket():
    event = parse_event("socket(AF_UNIX, SOCK_STREAM|SOCK_CLOEXEC|SOCK_NONBLOCK, 0) = 5")
    assert event.syscall == "socket"
    assert event.args == ("AF_UNIX", "SOCK_STREAM|SOCK_CLOEXEC|SOCK_NONBLOCK", "0")
    assert event.result == "5"


def test_parse_no_args():
    event = parse_event("getpid() = 222")
    assert event.syscall == "getpid"
    assert event.args == ()
    assert event.result == "222"


def test_parse_error_result():
    line = 'openat(AT_FDCWD, "/nope", O_RDONLY) = -1 ENOENT (No such file or directory)'
    parsed = parse_line(line)
    assert parsed["result"] == "-1"
    assert parsed["error_part"][0] == "ENOENT"
    assert parsed["error_part"][1] == "No such file or directory"
    assert parse_event(line).result == "-1"


def test_parse_question_mark_result():
    event = parse_event("exit_group(0) = ?")
    assert event.result == "?"


def test_parse_pid_prefix():
    event = parse_event("1855516 close(3) = 0")
    assert event.pid == 1855516
    assert event.syscall == "close"
    assert event.args == ("3",)


def test_parse_bracketed_pid_prefix():
    event = parse_event("[pid  4321] close(3) = 0")
    assert event.pid == 4321


def test_parse_timestamps():
    assert parse_event("10:20:30.123456 close(3) = 0").args == ("3",)
    assert parse_event("1700000000.123456 close(3) = 0").pid is None
    event = parse_event("42 10:20:30 close(3) = 0")
    assert event.pid == 42
    assert event.syscall == "close"


def test_parse_timing_suffix():
    event = parse_event('stat("/etc/hosts", {st_mode=S_IFREG|0644, ...}) = 0 <0.000015>')
    assert event.result == "0"


def test_parse_fd_annotations():
    """strace -y decorates fds in arguments and results."""
    event = parse_event('openat(AT_FDCWD, "/etc/passwd", O_RDONLY) = 3</etc/passwd>')
    assert event.result == "3"
    event = parse_event("close(3</etc/passwd>) = 0")
    assert event.args == ("3</etc/passwd>",)


def test_parse_result_note():
    event = parse_event("fcntl(3, F_GETFD) = 0x1 (flags FD_CLOEXEC)")
    assert event.result == "0x1"


# --- Test Functions for Parsing Failures ---


@pytest.mark.parametrize(
    "line",
    [
        "this is not strace output",
        "close(3)",
        "close(3 = 0",
    ],
)
def test_parse_invalid_lines(line):
    with pytest.raises(pp.ParseException):
        parse_line(line)


# --- parse_trace ---


def test_parse_trace_skips_noise_and_keeps_line_numbers():
    lines = [
        'openat(AT_FDCWD, "/a", O_RDONLY) = 3\n',
        "\n",
        "--- SIGCHLD {si_signo=SIGCHLD, si_code=CLD_EXITED} ---\n",
        "1234 read(3,  <unfinished ...>\n",
        "1234 <... read resumed>\"x\", 1) = 1\n",
        "garbage\n",
        "close(3) = 0\n",
        "1234 +++ exited with 0 +++\n",
        "+++ exited with 0 +++\n",
    ]
    events = list(parse_trace(lines))
    assert [(e.line_no, e.syscall) for e in events] == [(1, "openat"), (7, "close")]


def test_parse_trace_logs_unparsed_lines(caplog):
    with caplog.at_level("WARNING"):
        assert list(parse_trace(["not a syscall"])) == []
    assert "line 1" in caplog.text
