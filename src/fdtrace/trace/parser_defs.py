# Filename: src/fdtrace/trace/parser_defs.py
"""
Defines the pyparsing grammar for strace syscall output lines.
- Arguments are kept as their original text, split on top level commas only
- Quoted strings keep their quotes, escapes and any "..." truncation marker
- Arrays [..], structs {..} and calls f(..) stay a single argument
- The return value is kept as a raw string ("3", "-1", "0x1f", "?")
"""

import logging
import re

import pyparsing as pp

log = logging.getLogger(__name__)

# Basic elements
LPAREN, RPAREN, EQ = map(pp.Suppress, "()=")

# Leading "[pid NNN]" or "NNN " prefix
pid = (pp.Regex(r"\[pid\s+\d+\]") | pp.Regex(r"\d+(?=\s)")).set_parse_action(
    lambda t: int(re.search(r"\d+", t[0]).group())
)
# -t, -tt, -ttt and -r timestamps
timestamp = pp.Regex(r"\d{2}:\d{2}:\d{2}(?:\.\d+)?|\d+\.\d+").suppress()

syscall_name = pp.Word(pp.alphas + "_", pp.alphanums + "_")

# Strings, raw text including quotes and a trailing "..." if strace truncated it
quoted_string = pp.Regex(r'"(?:[^"\\]|\\.)*"(?:\.\.\.)?')

# Bracketed values may contain commas, quotes and further nesting
array = pp.nested_expr("[", "]", ignore_expr=quoted_string)
struct = pp.nested_expr("{", "}", ignore_expr=quoted_string)
call = pp.nested_expr("(", ")", ignore_expr=quoted_string)

# Flags, numbers, NULL, key=value, /* comments */, -y "3</path>" annotations
bare_word = pp.Word(pp.printables, exclude_chars=',()[]{}"')

argument = pp.original_text_for(
    pp.OneOrMore(quoted_string | array | struct | call | bare_word)
)
param_list = pp.Group(pp.Optional(pp.DelimitedList(argument, delim=",")))

# Result parsing
result_val = pp.Word(pp.printables, exclude_chars="<")
# strace -y decorates returned fds: "= 3</etc/passwd>", "= 4<pipe:[123]>"
fd_annotation = pp.Regex(r"<(?:[^<>]|<[^<>]*>)*>").suppress()

error_name = pp.Word(pp.alphas + "_", pp.alphanums + "_")
error_msg_content = pp.SkipTo(")")
error_part = pp.Group(error_name + LPAREN + error_msg_content + RPAREN)

# fcntl and friends: "= 0x1 (flags FD_CLOEXEC)"
result_note = pp.Regex(r"\([^)]*\)").suppress()
timing_part = pp.Regex(r"<\d+\.\d+>").suppress()

# Complete syscall line
syscall_body = (
    syscall_name.set_results_name("syscall")
    + LPAREN
    + param_list.set_results_name("args")
    + RPAREN
    + EQ
    + result_val.set_results_name("result")
    + pp.Optional(fd_annotation)
    + pp.Optional(error_part.set_results_name("error_part"))
    + pp.Optional(result_note)
    + pp.Optional(timing_part)
)

# Full line parser
full_line_parser = (
    pp.Optional(pid.set_results_name("pid"))
    + pp.Optional(timestamp)
    + syscall_body
    + pp.StringEnd()
)


def parse_line(line_str: str) -> pp.ParseResults:
    """
    Parse a single strace line into structured data.

    This parser only handles complete syscall lines (not unfinished/resumed
    lines, signals or exit banners).

    Args:
        line_str: A line from strace output

    Returns:
        ParseResults object with structured data:
        - pid: Process ID (int), only if the line has one
        - syscall: Syscall name (str)
        - args: List of raw argument strings
        - result: Raw return value (str)
        - error_part: Optional [errno name, message] group

    Raises:
        ParseException: If the line doesn't match the expected format
    """
    return full_line_parser.parse_string(line_str, parse_all=True)
