"""Constants and default values for AI Team."""

import re

# Default model configuration
DEFAULT_MODEL = "gpt-4o"

# Conversation limits
HISTORY_LIMIT = 50
CONTEXT_HISTORY_TURNS = 5

# Maximum automatic continuations within one cycle
DEFAULT_MAX_CONTINUATIONS = 25

# Review gate timeout in seconds (0 = wait indefinitely)
DEFAULT_REVIEW_TIMEOUT = 0

# File size limits (in MB)
DEFAULT_MAX_READ_MB = 8
DEFAULT_MAX_WRITE_MB = 2

# Per-project data directory
DATA_DIR = ".aiteam"

# Marker sent in place of user content on automatic continuations
CONTINUE_MARKER = (
    "[CONTINUE] No new user input. Continue from your previous output, "
    "using the tool results now present in the history."
)

# Provider endpoints, selected by credential prefix
OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
CEREBRAS_BASE_URL = "https://api.cerebras.ai/v1"

DEFAULT_OPENROUTER_REFERER = "https://github.com/aiteam/aiteam"
DEFAULT_OPENROUTER_TITLE = "AI Team"

ANTHROPIC_MAX_OUTPUT_TOKENS = 8192

# Built-in ignore patterns for the project tree
BUILTIN_IGNORES = [
    # Version control
    ".git/",
    ".hg/",
    ".svn/",

    # AI Team internal
    ".aiteam/",

    # Dependency directories
    "node_modules/",
    "venv/",
    ".venv/",
    "env/",
    "__pycache__/",
    "*.pyc",
    "*.egg-info/",

    # Build output
    "dist/",
    "build/",
    "out/",
    "target/",
    ".next/",

    # Tool caches
    ".pytest_cache/",
    ".mypy_cache/",
    ".ruff_cache/",
    ".tox/",

    # Editor files
    ".DS_Store",
    "*.swp",
    ".idea/",
]

# Dangerous command patterns (for terminal safety checks)
DANGEROUS_PATTERNS = [
    (re.compile(r'\bsudo\b'), "Use of sudo detected"),
    (re.compile(r'\brm\s+-rf\s+/'), "Recursive delete of root directory"),
    (re.compile(r':\(\)\{.*\|.*\&.*\}'), "Fork bomb pattern detected"),
    (re.compile(r'curl.*\|.*sh'), "Piping curl to shell"),
    (re.compile(r'wget.*\|.*sh'), "Piping wget to shell"),
    (re.compile(r'\bchmod\s+777'), "chmod 777 detected"),
    (re.compile(r'>\s*/dev/sd[a-z]'), "Writing to block device"),
    (re.compile(r'\bdd\s+.*of=/dev/'), "dd to block device"),
]
