"""Render the supported markdown subset to HTML fragments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

CODE_FENCE = "```"

# Checked in order against the stripped line; the first match wins.
BLOCK_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("### ", "h3"),
    ("## ", "h2"),
    ("# ", "h1"),
    ("- ", "li"),
)

HTML_ESCAPES: Tuple[Tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)

# (text, is_html) pairs. HTML segments are never rescanned by later passes.
Segment = Tuple[str, bool]


def split_lines(text: str) -> List[str]:
    r"""Split on "\n" only, dropping a trailing "\r" per line and the empty piece after a final newline."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def escape_html(text: str) -> str:
    # "&" goes first so the entities added below are left alone.
    for char, entity in HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def _push(result: List[Segment], text: str, is_html: bool = False) -> None:
    if not text:
        return
    if not is_html and result and not result[-1][1]:
        result[-1] = (result[-1][0] + text, False)
        return
    result.append((text, is_html))


def _scan_until(text: str, start: int, closing: str) -> Tuple[str, int, bool]:
    """Collect text from ``start`` up to ``closing``.

    Returns ``(captured, next_index, found)``. When the delimiter is missing the
    rest of the line is captured and ``next_index`` is the end of the text.
    """
    end = text.find(closing, start)
    if end == -1:
        return text[start:], len(text), False
    return text[start:end], end + len(closing), True


def _scan_bracket_span(text: str, start: int, opener: str) -> Tuple[Tuple[str, str], str, int]:
    """Scan ``label](url)`` after an opening ``[`` or ``![``.

    Returns ``((label, url), literal, next_index)``; ``literal`` is empty on a
    match and otherwise holds every consumed character, opener included.
    """
    label, i, closed = _scan_until(text, start, "]")
    if not closed or i >= len(text) or text[i] != "(":
        literal = opener + label + ("]" if closed else "")
        return ("", ""), literal, i
    url, i, found = _scan_until(text, i + 1, ")")
    if not found:
        return ("", ""), f"{opener}{label}]({url}", i
    return (label, url), "", i


def _find_italic_close(text: str, start: int) -> int:
    i = start
    while i < len(text):
        if text[i] == "*" and not text.startswith("*", i + 1):
            return i
        i += 1
    return -1


def parse_image(text: str) -> List[Segment]:
    result: List[Segment] = []
    i = start = 0
    while i < len(text):
        if text.startswith("![", i):
            _push(result, text[start:i])
            (alt, url), literal, i = _scan_bracket_span(text, i + 2, "![")
            if literal:
                _push(result, literal)
            else:
                _push(result, f'<img src="{escape_html(url)}" alt="{escape_html(alt)}" />', True)
            start = i
            continue
        i += 1
    _push(result, text[start:])
    return result


def parse_link(text: str) -> List[Segment]:
    result: List[Segment] = []
    i = start = 0
    while i < len(text):
        if text[i] == "[":
            _push(result, text[start:i])
            (label, url), literal, i = _scan_bracket_span(text, i + 1, "[")
            if literal:
                _push(result, literal)
            else:
                _push(result, f'<a href="{escape_html(url)}">{escape_html(label)}</a>', True)
            start = i
            continue
        i += 1
    _push(result, text[start:])
    return result


def parse_bold(text: str) -> List[Segment]:
    result: List[Segment] = []
    i = start = 0
    while i < len(text):
        if text.startswith("**", i):
            _push(result, text[start:i])
            content, i, found = _scan_until(text, i + 2, "**")
            if found:
                _push(result, f"<strong>{escape_html(content)}</strong>", True)
            else:
                _push(result, "**" + content)
            start = i
            continue
        i += 1
    _push(result, text[start:])
    return result


def parse_italic(text: str) -> List[Segment]:
    result: List[Segment] = []
    i = start = 0
    while i < len(text):
        # A "*" directly followed by another "*" is literal; the next one may still open.
        if text[i] == "*" and not text.startswith("*", i + 1):
            _push(result, text[start:i])
            close = _find_italic_close(text, i + 1)
            if close == -1:
                _push(result, text[i:])
                i = len(text)
            else:
                _push(result, f"<em>{escape_html(text[i + 1:close])}</em>", True)
                i = close + 1
            start = i
            continue
        i += 1
    _push(result, text[start:])
    return result


# Images before links (both contain "[...]"), bold before italic (both use "*").
INLINE_PASSES: Sequence[Callable[[str], List[Segment]]] = (
    parse_image,
    parse_link,
    parse_bold,
    parse_italic,
)


def render_inline(text: str) -> str:
    if not text:
        return ""
    segments: List[Segment] = [(text, False)]
    for inline_pass in INLINE_PASSES:
        rebuilt: List[Segment] = []
        for segment, is_html in segments:
            if is_html:
                rebuilt.append((segment, True))
                continue
            for piece, piece_is_html in inline_pass(segment):
                _push(rebuilt, piece, piece_is_html)
        segments = rebuilt
    return "".join(segment if is_html else escape_html(segment) for segment, is_html in segments)


@dataclass
class RenderState:
    in_code_block: bool = False
    code_buffer: List[str] = field(default_factory=list)


def render_block_line(stripped: str) -> str:
    """Render one non-code line, already stripped. Blank lines render as ``""``."""
    for prefix, tag in BLOCK_PREFIXES:
        if stripped.startswith(prefix):
            return f"<{tag}>{render_inline(stripped[len(prefix):])}</{tag}>\n"
    if stripped:
        return f"<p>{render_inline(stripped)}</p>\n"
    return ""


def markdown_to_html(markdown: str) -> str:
    html: List[str] = []
    state = RenderState()

    for line in split_lines(markdown):
        if line.lstrip().startswith(CODE_FENCE):
            if state.in_code_block:
                code = "".join(state.code_buffer)
                html.append(f"<pre><code>{escape_html(code)}</code></pre>\n")
                state.code_buffer.clear()
            state.in_code_block = not state.in_code_block
            continue

        if state.in_code_block:
            state.code_buffer.append(line + "\n")
            continue

        html.append(render_block_line(line.strip()))

    # An unterminated fence is dropped together with its buffered lines.
    return "".join(html)
