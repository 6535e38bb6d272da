"""Two-pass templating: literal token replacement, then conditional blocks.

Tokens look like ``{{NAME}}`` and are replaced verbatim. Blocks look like
``{{#NAME}}...{{/NAME}}``; a kept block loses only its markers, a dropped
block loses markers and everything between them. Markers are matched as
plain substrings, shortest span first.
"""

from typing import Mapping, Tuple


def block_markers(name: str) -> Tuple[str, str]:
    return "{{#" + name + "}}", "{{/" + name + "}}"


def replace_tokens(template: str, replacements: Mapping[str, str]) -> str:
    for token, value in replacements.items():
        template = template.replace(token, value)
    return template


def resolve_block(template: str, name: str, keep: bool) -> str:
    open_marker, close_marker = block_markers(name)
    if keep:
        return template.replace(open_marker, "").replace(close_marker, "")

    search_from = 0
    while True:
        start = template.find(open_marker, search_from)
        if start == -1:
            return template
        end = template.find(close_marker, start + len(open_marker))
        if end == -1:
            # unmatched opener stays in place
            return template
        template = template[:start] + template[end + len(close_marker):]
        search_from = start


def resolve_blocks(template: str, conditions: Mapping[str, bool]) -> str:
    for name, keep in conditions.items():
        template = resolve_block(template, name, bool(keep))
    return template


def render(template: str, replacements: Mapping[str, str], conditions: Mapping[str, bool]) -> str:
    return resolve_blocks(replace_tokens(template, replacements), conditions)
