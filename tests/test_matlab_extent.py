import os
import sys
import textwrap

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from matlab_extent import (
    BlockError,
    detect_functions_have_end,
    end_of_definition,
    iter_block_keywords,
    resolve_end,
    skip_block,
)


def test_skip_block_balances_nested_blocks() -> None:
    text = textwrap.dedent(
        """\
        function foo(x)
          if x
            y = x(end);
          end
        end
        % trailing
        """
    )

    assert skip_block(text, 0) == text.index("end\n% trailing") + 3


@pytest.mark.parametrize(
    "body",
    [
        "  s = 'end';\n  % end\n  t = \"if\";\n",
        "  b = a';\n  c = a'';\n",
        "  s.end = 1;\n",
        "%{\nif x\nend\n%}\n",
        "  x = bar(1, ... if\n    2);\n",
        "  m = [1 2\n       3 4];\n  n = m(end, :);\n",
        "  c = {x(1), ...\n       x(end)};\n",
        "  arguments\n    x double\n  end\n",
    ],
)
def test_skip_block_ignores_non_structural_keywords(body: str) -> None:
    text = "function foo(x)\n" + body + "end\n"

    assert skip_block(text, 0) == len(text) - 1


def test_skip_block_nested_function() -> None:
    text = "function outer\n  function inner\n  end\nend\n"
    inner_start = text.index("  function inner")

    assert skip_block(text, 0) == len(text) - 1
    assert skip_block(text, inner_start) == text.index("end\nend") + 3


def test_skip_block_unbalanced_raises() -> None:
    with pytest.raises(BlockError):
        skip_block("function foo\n  if x\n    y = 1;\nend\n", 0)


def test_iter_block_keywords_reports_offsets() -> None:
    text = "function f\nwhile 1\nend\nend"

    words = [(word, text[start:end]) for word, start, end in iter_block_keywords(text)]

    assert words == [
        ("function", "function"),
        ("while", "while"),
        ("end", "end"),
        ("end", "end"),
    ]


def test_end_of_definition_stops_at_next_header() -> None:
    text = "function a\n  x = 1;\nfunction b\n  y = 2;\n"

    assert end_of_definition(text, 0) == text.index("function b")
    assert end_of_definition(text, text.index("function b")) == len(text)


def test_detect_functions_have_end() -> None:
    assert detect_functions_have_end("function a\n  x = 1;\nend\n")
    assert not detect_functions_have_end("function a\n if x\n end\nfunction b\n y = 1;\n")
    assert not detect_functions_have_end("x = 1;\n")


def test_resolve_end_falls_back_to_end_of_text() -> None:
    text = "function foo(x)\n  if x\n    y = 1;\n"

    assert resolve_end(text, 0, functions_have_end=True) == len(text)


def test_resolve_end_without_explicit_end() -> None:
    text = "function a\n  if x\n  end\nfunction b\n"

    assert resolve_end(text, 0, functions_have_end=False) == text.index("function b")
    assert resolve_end(text, 0) == text.index("function b")


def test_skip_block_crlf_block_comment() -> None:
    text = "function outer(x)\r\n%OUTER Outer.\r\n%{\r\nUse this if needed\r\n%}\r\n  function inner\r\n  end\r\nend\r\n"

    assert detect_functions_have_end(text)
    assert skip_block(text, 0) == len(text) - 2


def test_skip_block_crlf_arguments_block() -> None:
    text = "function foo(x)\r\n  arguments\r\n    x double\r\n  end\r\n  y = x;\r\nend\r\n"

    assert skip_block(text, 0) == len(text) - 2
