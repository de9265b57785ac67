"""Prompt assembly for each model call."""

from typing import Optional

from aiteam.constants import CONTINUE_MARKER

TOOL_INSTRUCTIONS = """# Tools

You work inside the user's project. To act on it, write tool directives in
your reply, exactly as shown. They are executed after your reply ends.

## Read a file
<read_file path="relative/path.ext" />
The file's content is added to the conversation and you are called again.

## Propose a file write
<write_file path="relative/path.ext">
full new content of the file
</write_file>
The user reviews a diff and accepts or rejects it. Always send the complete
file, never a fragment. Propose one file per reply and wait for the decision.

## Run a shell command
<execute_command>npm test</execute_command>
The command runs in the project root. Its output is NOT returned to you.

## Rules
- Attribute values use double quotes. Directives cannot be nested.
- Paths are relative to the project root.
- When the task is complete, reply without any directive.
"""


class PromptBuilder:
    """Builds the user content sent on every model call."""

    def __init__(self, instructions: str = TOOL_INSTRUCTIONS):
        self.instructions = instructions

    def build(
        self,
        context_block: str,
        project_tree: str,
        open_file: Optional[tuple[str, str]],
        user_prompt: Optional[str],
    ) -> str:
        """Assemble the full prompt.

        Args:
            context_block: Rendered project state and recent history
            project_tree: Rendered project file list
            open_file: Optional (path, text) of the file the user has open
            user_prompt: User's request, or None for an automatic continuation

        Returns:
            Prompt text
        """
        parts = [
            self.instructions,
            context_block,
            f"[PROJECT FILES]\n{project_tree}",
        ]

        if open_file:
            path, text = open_file
            parts.append(f"[OPEN FILE: {path}]\n```\n{text}\n```")

        if user_prompt is None:
            parts.append(CONTINUE_MARKER)
        else:
            parts.append(f"User Request: {user_prompt}")

        return "\n\n".join(parts)
