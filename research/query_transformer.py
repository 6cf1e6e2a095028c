"""Natural-language query → search-engine query."""

from api.base_client import BaseCompletionClient
from utils.logger import get_logger

from .prompts import PromptStore

logger = get_logger(__name__)

REFINE_MAX_TOKENS = 4000


class QueryTransformer:
    """
    Asks the completion model to rewrite a user query with search operators
    (filetype:, site:, intitle:, ...).

    transform() NEVER raises: every failure degrades to the original query.
    """

    def __init__(self, client: BaseCompletionClient, prompts: PromptStore):
        self.client = client
        self.prompts = prompts

    def transform(self, raw_query: str) -> str:
        try:
            instruction = self.prompts.search_instruction()
            result = self.client.complete(instruction, raw_query, max_tokens=REFINE_MAX_TOKENS)
            refined = result.text.strip()
        except Exception as e:
            logger.warning(
                "Query refinement failed, using original query",
                extra={"extra_fields": {"error": str(e), "error_type": type(e).__name__}},
            )
            return raw_query

        if not refined:
            logger.warning("Query refinement returned empty text, using original query")
            return raw_query

        if refined != raw_query:
            logger.info(f"Query refined: '{raw_query[:50]}' → '{refined[:80]}'")
        return refined
