import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

PLACEHOLDER_VALUES = {
    "your_claude_api_key_here",
    "your_openai_api_key_here",
    "your_google_search_api_key_here",
    "your_google_custom_search_engine_id_here",
}

DEFAULT_PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class ModelType(Enum):
    """Supported completion providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


def is_configured(value: str | None) -> bool:
    """True when a credential is present and is not a template placeholder."""
    if not value or not value.strip():
        return False
    return value.strip() not in PLACEHOLDER_VALUES


class Config:
    """Configuration management for the application."""

    def __init__(self, env_file: Path | None = None):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = env_file or Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Completion provider
        self.MODEL_TYPE = os.getenv('MODEL_TYPE', ModelType.ANTHROPIC.value).lower()
        self.CLAUDE_API_KEY = os.getenv('CLAUDE_API_KEY')
        self.DEFAULT_CLAUDE_MODEL = os.getenv('DEFAULT_CLAUDE_MODEL', 'claude-3-5-sonnet-20241022')
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.DEFAULT_OPENAI_MODEL = os.getenv('DEFAULT_OPENAI_MODEL', 'gpt-4o-mini')

        # Search provider
        self.GOOGLE_SEARCH_API_KEY = os.getenv('GOOGLE_SEARCH_API_KEY')
        self.GOOGLE_SEARCH_ENGINE_ID = os.getenv('GOOGLE_SEARCH_ENGINE_ID')
        self.MAX_RESULTS = int(os.getenv('MAX_RESULTS', '10'))

        # Resources and output
        self.PROMPTS_DIR = Path(os.getenv('PROMPTS_DIR', str(DEFAULT_PROMPTS_DIR)))
        self.PRODUCT_NAME = os.getenv('PRODUCT_NAME', 'DeepFastSearch')
        self.REQUEST_TIMEOUT_S = float(os.getenv('REQUEST_TIMEOUT_S', '60'))

    @property
    def DEFAULT_MODEL(self) -> str:
        if self.MODEL_TYPE == ModelType.OPENAI.value:
            return self.DEFAULT_OPENAI_MODEL
        return self.DEFAULT_CLAUDE_MODEL

    def validate(self) -> list[str]:
        """
        Check that the credentials required by the selected providers are present.

        Returns:
            list[str]: Human-readable problems; empty when the configuration is usable
        """
        problems = []
        if self.MODEL_TYPE == ModelType.ANTHROPIC.value:
            if not is_configured(self.CLAUDE_API_KEY):
                problems.append("CLAUDE_API_KEY is not set. Please set it in the .env file.")
        elif self.MODEL_TYPE == ModelType.OPENAI.value:
            if not is_configured(self.OPENAI_API_KEY):
                problems.append("OPENAI_API_KEY is not set. Please set it in the .env file.")
        else:
            problems.append(
                f"Unknown MODEL_TYPE '{self.MODEL_TYPE}'. Must be one of: {', '.join([e.value for e in ModelType])}"
            )

        if not is_configured(self.GOOGLE_SEARCH_API_KEY):
            problems.append("GOOGLE_SEARCH_API_KEY is not set. Please set it in the .env file.")
        if not is_configured(self.GOOGLE_SEARCH_ENGINE_ID):
            problems.append("GOOGLE_SEARCH_ENGINE_ID is not set. Please set it in the .env file.")
        if self.MAX_RESULTS < 1:
            problems.append(f"MAX_RESULTS must be at least 1, got {self.MAX_RESULTS}")

        return problems

    def get_model_info(self) -> str:
        """
        Get information about the currently selected model.

        Returns:
            str: Formatted string with model information
        """
        if self.MODEL_TYPE == ModelType.ANTHROPIC.value:
            return f"Anthropic Claude ({self.DEFAULT_MODEL})"
        elif self.MODEL_TYPE == ModelType.OPENAI.value:
            return f"OpenAI ({self.DEFAULT_MODEL})"
        return "Unknown"
