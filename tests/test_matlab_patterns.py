import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from matlab_patterns import (
    extract_docstring,
    find_header,
    is_under_system_root,
    match_builtin,
    split_clause,
)


def test_find_header_single_return() -> None:
    text = "function y = foo(a,b)\n%FOO Computes foo.\n"

    header = find_header(text)

    assert header is not None
    assert header.start == 0
    assert header.name == "foo"
    assert split_clause(header.return_clause) == ("y",)
    assert split_clause(header.arg_clause) == ("a", "b")
    assert header.line_end == text.index("\n")


def test_find_header_bracket_returns_and_comment() -> None:
    text = "function [out1, out2] = compute(a, b) % compute both\n"

    header = find_header(text)

    assert header.name == "compute"
    assert split_clause(header.return_clause) == ("out1", "out2")
    assert split_clause(header.arg_clause) == ("a", "b")


def test_find_header_without_returns_or_args() -> None:
    header = find_header("  function setup\n  x = 1;\n")

    assert header.start == 0
    assert header.name == "setup"
    assert header.return_clause == ""
    assert split_clause(header.arg_clause) == ()


def test_find_header_joins_continuation_lines() -> None:
    text = "function r = f(a, ...\n    b)\nr = a + b;\n"

    header = find_header(text)

    assert split_clause(header.arg_clause) == ("a", "b")
    assert header.line_end == text.index("\nr = a")


def test_find_header_ignores_trailing_statement() -> None:
    header = find_header("function show(msg), disp(msg)\n")

    assert split_clause(header.arg_clause) == ("msg",)


def test_find_header_from_offset() -> None:
    text = "function a\nx = 1;\nfunction b\n"
    first = find_header(text)

    second = find_header(text, first.line_end)

    assert second.name == "b"
    assert second.start == text.index("function b")
    assert find_header(text, second.line_end) is None


def test_find_header_requires_keyword() -> None:
    assert find_header("functionality = 3;\n% function in comment\n") is None


def test_split_clause_discards_empty_tokens() -> None:
    assert split_clause("[ a,  b ] =") == ("a", "b")
    assert split_clause("(x, ~, varargin)") == ("x", "~", "varargin")
    assert split_clause("") == ()


def test_docstring_uppercase_tag() -> None:
    text = "function foo\n%FOO Does it.\n"
    assert extract_docstring(text, text.index("\n")) == "Does it."


def test_docstring_generic_comment() -> None:
    text = "function foo\n  %% does things  \n"
    assert extract_docstring(text, text.index("\n")) == "does things"


def test_docstring_after_blank_lines() -> None:
    text = "function foo\n\n\n  % later comment\nx = 1;\n"
    assert extract_docstring(text, text.index("\n")) == "later comment"


def test_docstring_missing() -> None:
    text = "function foo\nx = 1; % not a doc\n"
    assert extract_docstring(text, text.index("\n")) is None
    assert extract_docstring("function foo", len("function foo")) is None


def test_docstring_empty_comment_is_none() -> None:
    text = "function foo\n%\n% real text\n"
    assert extract_docstring(text, text.index("\n")) is None


def test_is_under_system_root() -> None:
    roots = ["/opt/matlab/toolbox"]

    assert is_under_system_root("/opt/matlab/toolbox/signal/bar.m", roots)
    assert is_under_system_root("/opt/matlab/toolbox/bar.m", ["/opt/matlab/toolbox/"])
    assert not is_under_system_root("/opt/matlab/toolbox/signal/private/bar.m", roots)
    assert not is_under_system_root("/home/user/bar.m", roots)
    assert not is_under_system_root(None, roots)
    assert not is_under_system_root("/opt/matlab/toolbox/bar.m", [])


def test_match_builtin() -> None:
    text = "\n%BAR Short description\n%   See also FOO.\n"
    assert match_builtin(text) == ("bar", "Short description")


def test_match_builtin_requires_first_line() -> None:
    assert match_builtin("x = 1;\n%BAR Short description\n") is None
    assert match_builtin("% bar lowercase\n") is None
    assert match_builtin("") is None
