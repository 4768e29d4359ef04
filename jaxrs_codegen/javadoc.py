"""Render description text as Javadoc HTML.

Supports the small Markdown subset contracts actually use: paragraphs,
bullet lists, fenced or indented code blocks, inline code, emphasis and
strong emphasis. Lines are wrapped to a fixed width so output is stable.
"""

from __future__ import annotations

import html
import re
import textwrap

from .model import Operation, ResponseSpec

WRAP_WIDTH = 76

_BULLET_RE = re.compile(r"^\s*[*+-]\s+(.*)$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_CODE_RE = re.compile(r"`([^`]+)`")
_STRONG_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_EM_RE = re.compile(r"(?<![\w*])\*(?!\s)(.+?)(?<!\s)\*(?!\w)|(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)")


def _escape(text: str) -> str:
    return html.escape(text, quote=False).replace("*/", "*&#47;").replace("@", "&#64;")


def inline(text: str) -> str:
    """Escape text and convert inline code, strong and emphasis markup."""
    codes: list[str] = []

    def keep_code(match: re.Match[str]) -> str:
        codes.append(f"<code>{_escape(match.group(1))}</code>")
        return f"\x00{len(codes) - 1}\x00"

    text = _CODE_RE.sub(keep_code, text)
    text = _escape(text)
    text = _STRONG_RE.sub(lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>", text)
    text = _EM_RE.sub(lambda m: f"<em>{m.group(1) or m.group(2)}</em>", text)
    return re.sub(r"\x00(\d+)\x00", lambda m: codes[int(m.group(1))], text)


def _wrap(text: str) -> list[str]:
    return textwrap.wrap(
        text, width=WRAP_WIDTH, break_long_words=False, break_on_hyphens=False,
    ) or [""]


def _blocks(text: str) -> list[tuple[str, list[str]]]:
    """Split text into (kind, lines) blocks: paragraph, list or code."""
    blocks: list[tuple[str, list[str]]] = []
    lines = text.replace("\r\n", "\n").split("\n")
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            i += 1
            continue
        if _FENCE_RE.match(line):
            fence = _FENCE_RE.match(line).group(1)
            code: list[str] = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(fence):
                code.append(lines[i])
                i += 1
            blocks.append(("code", code))
            i += 1
            continue
        if line.startswith("    ") or line.startswith("\t"):
            code = []
            while i < len(lines) and (lines[i].startswith(("    ", "\t")) or not lines[i].strip()):
                code.append(lines[i][4:] if lines[i].startswith("    ") else lines[i].lstrip("\t"))
                i += 1
            while code and not code[-1].strip():
                code.pop()
            blocks.append(("code", code))
            continue
        if _BULLET_RE.match(line):
            items: list[str] = []
            while i < len(lines) and lines[i].strip():
                bullet = _BULLET_RE.match(lines[i])
                if bullet:
                    items.append(bullet.group(1).strip())
                elif items:
                    items[-1] += " " + lines[i].strip()
                i += 1
            blocks.append(("list", items))
            continue
        paragraph: list[str] = []
        while (
            i < len(lines)
            and lines[i].strip()
            and not _BULLET_RE.match(lines[i])
            and not _FENCE_RE.match(lines[i])
        ):
            paragraph.append(lines[i].strip())
            i += 1
        blocks.append(("paragraph", [" ".join(paragraph)]))
    return blocks


def render_description(text: str) -> list[str]:
    """Javadoc HTML lines (without comment prefixes) for a description."""
    out: list[str] = []
    for kind, lines in _blocks(text or ""):
        if kind == "paragraph":
            out.append("<p>")
            out.extend(_wrap(inline(lines[0])))
            out.append("</p>")
        elif kind == "list":
            out.append("<ul>")
            for item in lines:
                out.extend(_wrap(f"<li>{inline(item)}</li>"))
            out.append("</ul>")
        else:
            out.append("<pre>")
            body = "\n".join(_escape(line) for line in lines)
            out.extend(f"<code>{body}\n</code>".split("\n"))
            out.append("</pre>")
    return out


def failure_list(responses: dict[str, ResponseSpec]) -> list[str]:
    """Enumerated failures (status code -> condition) from error responses."""
    failures = [
        r for r in responses.values()
        if r.code[:1] in ("4", "5") and r.description.strip()
    ]
    if not failures:
        return []
    out = ["<p>", "This operation may fail for one of the following reasons:", "</p>", "<ul>"]
    for response in failures:
        condition = inline(response.description.strip().rstrip("."))
        out.extend(_wrap(f"<li>{condition} (HTTP error <code>{response.code}</code>)</li>"))
    out.append("</ul>")
    return out


def operation_javadoc(operation: Operation) -> list[str]:
    """Description (or summary) plus the failure list unless the text already has one."""
    text = operation.description or operation.summary
    lines = render_description(text)
    if "HTTP error" not in text:
        lines.extend(failure_list(operation.responses))
    return lines
