"""Factories wiring clients and research components from configuration."""

from typing import Callable, Optional

from api.anthropic_client import AnthropicClient
from api.base_client import BaseCompletionClient
from api.google_search_client import GoogleSearchClient
from api.openai_client import OpenAIClient
from config.config import Config, ModelType
from models.completion import CompletionResult
from utils.logger import get_logger

from .prompts import PromptStore
from .query_transformer import QueryTransformer
from .report_composer import ReportComposer
from .report_exporter import ReportExporter
from .search_gateway import SearchGateway
from .session_state import WorkspaceRegistry
from .workspace import ResearchWorkspace

logger = get_logger(__name__)


def create_completion_client(
    config: Config,
    on_result: Optional[Callable[[CompletionResult], object]] = None,
) -> BaseCompletionClient:
    """
    Initialize the completion client selected by MODEL_TYPE.

    Credentials are not checked here; a missing key surfaces as a
    ConfigurationError on first use.

    Raises:
        ValueError: If MODEL_TYPE is unsupported
    """
    model_type = config.MODEL_TYPE

    if model_type == ModelType.ANTHROPIC.value:
        client = AnthropicClient(
            api_key=config.CLAUDE_API_KEY,
            model_name=config.DEFAULT_CLAUDE_MODEL,
            on_result=on_result,
            timeout_s=config.REQUEST_TIMEOUT_S,
        )
    elif model_type == ModelType.OPENAI.value:
        client = OpenAIClient(
            api_key=config.OPENAI_API_KEY,
            model_name=config.DEFAULT_OPENAI_MODEL,
            on_result=on_result,
            timeout_s=config.REQUEST_TIMEOUT_S,
        )
    else:
        raise ValueError(f"Unsupported MODEL_TYPE: {model_type}. Must be 'anthropic' or 'openai'")

    logger.info(f"Initialized completion client: {config.get_model_info()}")
    return client


def create_search_client(config: Config) -> GoogleSearchClient:
    return GoogleSearchClient(
        api_key=config.GOOGLE_SEARCH_API_KEY,
        engine_id=config.GOOGLE_SEARCH_ENGINE_ID,
        timeout_s=config.REQUEST_TIMEOUT_S,
    )


def create_workspace_factory(
    config: Config,
    on_result: Optional[Callable[[CompletionResult], object]] = None,
) -> Callable[[], ResearchWorkspace]:
    """
    Build the stateless components once; each call of the returned factory
    yields a workspace with its own selection state.
    """
    completion = create_completion_client(config, on_result=on_result)
    prompts = PromptStore(config.PROMPTS_DIR)
    transformer = QueryTransformer(completion, prompts)
    gateway = SearchGateway(create_search_client(config), default_max_results=config.MAX_RESULTS)
    composer = ReportComposer(completion, prompts)
    exporter = ReportExporter(product_name=config.PRODUCT_NAME)

    def build() -> ResearchWorkspace:
        return ResearchWorkspace(transformer, gateway, composer, exporter)

    return build


def create_registry_from_env() -> WorkspaceRegistry:
    config = Config()
    for problem in config.validate():
        logger.warning(problem)
    return WorkspaceRegistry(create_workspace_factory(config))
