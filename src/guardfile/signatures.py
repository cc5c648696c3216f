"""Locate plugin signatures inside Guardfile text.

A signature is the block a plugin owns in the Guardfile::

    guard :sass, :input => 'app/assets/sass', :output => 'public/css'

    guard :less, :output => 'public/css' do
      watch(%r{^app/assets/less/.+\\.less$})
    end

Blocks start at ``guard :<plugin>`` and run up to the next blank line or the
end of the file. Two families differ:

* concat signatures (``guard :concat, type: "js"``) are single lines and are
  matched case-insensitively up to the end of the line;
* ``refresher`` ships a custom ``module ::Guard`` class ahead of its
  ``guard :refresher`` line; the wrapper belongs to the same signature.

All functions are string-based (no file I/O). Callers handle persistence.
"""

from __future__ import annotations

import re

import guardfile.compiler

REFRESHER = "refresher"


def signature_pattern(plugin: str) -> re.Pattern[str]:
    """Compile the regex matching *plugin*'s signature block."""
    name, language = guardfile.compiler.split_plugin(plugin)
    if language is not None:
        return re.compile(
            rf'guard :{name}, type: "{re.escape(language)}".+',
            re.IGNORECASE,
        )

    # A bare ``guard :<plugin>`` line is a complete block.
    wrapper = r"(?:^module\b.+?)?" if name == REFRESHER else ""
    return re.compile(
        rf"{wrapper}guard :{re.escape(name)}(?!\w).*?(?=\n\n|\n?\Z)",
        re.DOTALL | re.MULTILINE,
    )


def find_signature_spans(content: str, plugin: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of every signature for *plugin*."""
    return [m.span() for m in signature_pattern(plugin).finditer(content)]


def has_signature(content: str, plugin: str) -> bool:
    return bool(find_signature_spans(content, plugin))


def extract_signatures(content: str, plugin: str) -> list[str]:
    """Return the text of every signature for *plugin*."""
    return [content[start:end] for start, end in find_signature_spans(content, plugin)]


def replace_spans(content: str, spans: list[tuple[int, int]], replacement: str) -> str:
    """Replace each non-overlapping span with *replacement*, verbatim."""
    pieces: list[str] = []
    cursor = 0
    for start, end in sorted(spans):
        pieces.append(content[cursor:start])
        pieces.append(replacement)
        cursor = end
    pieces.append(content[cursor:])
    return "".join(pieces)


def replace_signature(content: str, plugin: str, compiled: str) -> tuple[str, int]:
    """Swap every signature of *plugin* for *compiled*.

    Returns the new content and the number of signatures replaced; with no
    match the content comes back unchanged.
    """
    spans = find_signature_spans(content, plugin)
    return replace_spans(content, spans, compiled), len(spans)
