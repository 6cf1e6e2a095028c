"""Instruction templates for query refinement and report generation."""

from pathlib import Path

from utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_PROMPT_FILE = "SearchPrompt.txt"
REPORT_PROMPT_FILE = "ReportPrompt.txt"

DEFAULT_SEARCH_PROMPT = (
    "Transform this query into an effective Google search query using advanced "
    "search operators when appropriate."
)
DEFAULT_REPORT_PROMPT = (
    "Generate a comprehensive research report based on the provided sources and documents."
)


class PromptStore:
    """
    Loads instruction templates from a directory.

    Files are re-read on every call so edits apply without a restart. A missing
    or unreadable file yields the built-in default; loading never raises.
    """

    def __init__(self, prompts_dir: Path):
        self.prompts_dir = Path(prompts_dir)

    def search_instruction(self) -> str:
        return self._load(SEARCH_PROMPT_FILE, DEFAULT_SEARCH_PROMPT)

    def report_instruction(self) -> str:
        return self._load(REPORT_PROMPT_FILE, DEFAULT_REPORT_PROMPT)

    def _load(self, filename: str, default: str) -> str:
        path = self.prompts_dir / filename
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "Falling back to built-in instruction",
                extra={"extra_fields": {"path": str(path), "error": str(e)}},
            )
            return default

        if not text.strip():
            logger.warning("Instruction file is empty", extra={"extra_fields": {"path": str(path)}})
            return default
        return text
