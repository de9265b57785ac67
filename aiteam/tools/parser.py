"""Extraction of tool directives embedded in model output.

The model requests side effects by writing one of three tags in its reply:

    <read_file path="src/app.py" />
    <write_file path="README.md">...content...</write_file>
    <execute_command>npm test</execute_command>

Directives are found by a single left-to-right scan, so the returned list
follows the order in which they appear in the text, across all kinds. Text
inside a ``write_file`` body is file content and is never parsed as a
directive. Malformed or unterminated tags yield nothing in the lenient mode;
``parse_strict`` additionally reports them as warnings.
"""

import re
from dataclasses import dataclass
from typing import Union

READ_FILE_PATTERN = r'<read_file\s+path="(?P<read_path>[^"]+)"\s*/>'
WRITE_FILE_PATTERN = (
    r'<write_file\s+path="(?P<write_path>[^"]+)">(?P<write_body>[\s\S]*?)</write_file>'
)
EXECUTE_COMMAND_PATTERN = r"<execute_command>(?P<command>[\s\S]*?)</execute_command>"

DIRECTIVE_RE = re.compile(
    "|".join([READ_FILE_PATTERN, WRITE_FILE_PATTERN, EXECUTE_COMMAND_PATTERN])
)

# Opening tags, used only to detect directives that never closed
OPENING_TAG_RE = re.compile(r"<(?P<tag>read_file|write_file|execute_command)\b")


@dataclass(frozen=True)
class ReadFile:
    """Request to read a project file into the conversation."""

    path: str


@dataclass(frozen=True)
class WriteFile:
    """Proposal to replace a file's content, subject to review."""

    path: str
    content: str


@dataclass(frozen=True)
class ExecuteCommand:
    """Request to run a shell command in the project terminal."""

    command: str


ToolInvocation = Union[ReadFile, WriteFile, ExecuteCommand]


@dataclass(frozen=True)
class ParseWarning:
    """An opening tag with no well-formed directive around it."""

    tag: str
    offset: int

    def describe(self) -> str:
        return (
            f"<{self.tag}> at offset {self.offset} was not closed or is malformed; "
            "it was ignored. If your output was cut off, repeat the directive."
        )


def parse(text: str) -> list[ToolInvocation]:
    """Extract tool invocations from model output (lenient mode).

    Args:
        text: Raw model output

    Returns:
        Invocations in source order; malformed tags are silently skipped
    """
    return [_to_invocation(match) for match in DIRECTIVE_RE.finditer(text)]


def parse_strict(text: str) -> tuple[list[ToolInvocation], list[ParseWarning]]:
    """Extract tool invocations and report tags that could not be parsed.

    Args:
        text: Raw model output

    Returns:
        Tuple of (invocations, warnings)
    """
    invocations = []
    spans = []
    for match in DIRECTIVE_RE.finditer(text):
        invocations.append(_to_invocation(match))
        spans.append(match.span())

    warnings = []
    for opening in OPENING_TAG_RE.finditer(text):
        offset = opening.start()
        if not any(start <= offset < end for start, end in spans):
            warnings.append(ParseWarning(tag=opening.group("tag"), offset=offset))

    return invocations, warnings


def _to_invocation(match: re.Match) -> ToolInvocation:
    if match.group("read_path") is not None:
        return ReadFile(path=match.group("read_path"))
    if match.group("write_path") is not None:
        return WriteFile(path=match.group("write_path"), content=match.group("write_body").strip())
    return ExecuteCommand(command=match.group("command").strip())
