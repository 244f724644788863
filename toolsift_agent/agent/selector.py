"""Tool selector: one LLM round-trip that narrows the catalog for a query."""

from typing import Any

from loguru import logger

from toolsift_agent.agent.context import ContextBuilder
from toolsift_agent.agent.tools.base import SELECTION_TOOL, ReducedToolSet, ToolCatalog
from toolsift_agent.providers.base import LLMProvider, LLMResponse


class ToolSelector:
    """
    Asks the model which catalog tools are relevant to a query.

    The model answers by calling the `inform-tool` meta-tool with a list of
    names. Names missing from the catalog are dropped, and any response that
    does not carry a usable selection yields an empty tool set.
    """

    def __init__(
        self,
        provider: LLMProvider,
        context: ContextBuilder | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.0,
    ) -> None:
        self.provider = provider
        self.context = context or ContextBuilder()
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def select(self, query: str, catalog: ToolCatalog) -> ReducedToolSet:
        """
        Select the tools relevant to `query`.

        Args:
            query: The operator's query, verbatim.
            catalog: Full session catalog.

        Returns:
            The catalog tools named by the model, in catalog order.
        """
        messages = self.context.build_selection_messages(query, catalog)
        response = await self.provider.chat(
            messages=messages,
            tools=[SELECTION_TOOL.to_schema()],
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            tool_choice={"type": "function", "function": {"name": SELECTION_TOOL.name}},
        )

        names = self._parse_selection(response)
        if names is None:
            logger.debug("No usable tool selection in the model response, continuing without tools")
            return ReducedToolSet()

        selected = tuple(tool for name, tool in catalog.items() if name in names)
        dropped = names - set(catalog)
        if dropped:
            logger.debug(f"Ignoring selected tools missing from the catalog: {sorted(dropped)}")
        logger.info(f"Selected tools: {[tool.name for tool in selected]}")
        return ReducedToolSet(tools=selected)

    @staticmethod
    def _parse_selection(response: LLMResponse) -> set[str] | None:
        """Extract the tool names from the first meta-tool call, or None when absent or malformed."""
        for call in response.tool_calls:
            if call.name != SELECTION_TOOL.name:
                continue
            tools: Any = call.arguments.get("tools")
            if not isinstance(tools, list):
                return None
            return {name for name in tools if isinstance(name, str)}
        return None
