"""Session lifecycle: connect, fetch the catalog once, answer queries, close once."""

from __future__ import annotations

import asyncio

from loguru import logger

from toolsift_agent.agent.context import ContextBuilder
from toolsift_agent.agent.loop import ConversationDriver
from toolsift_agent.agent.selector import ToolSelector
from toolsift_agent.agent.tools.base import ToolCatalog
from toolsift_agent.agent.tools.registry import ToolServerRegistry
from toolsift_agent.config.schema import Config
from toolsift_agent.providers.base import LLMProvider


class ChatSession:
    """
    One interactive session against one tool server.

    The catalog is fetched once by `start()` and read-only afterwards; the
    conversation history of each query lives and dies inside `process_query`.
    """

    def __init__(
        self,
        registry: ToolServerRegistry,
        selector: ToolSelector,
        driver: ConversationDriver,
        settle_delay: float = 0.0,
    ) -> None:
        self.registry = registry
        self.selector = selector
        self.driver = driver
        self.settle_delay = settle_delay
        self.catalog = ToolCatalog()
        self._closed = False

    @classmethod
    def from_config(cls, config: Config, provider: LLMProvider) -> ChatSession:
        """Wire the registry, selector and driver from the loaded configuration."""
        registry = ToolServerRegistry.from_config(config.tool_server)
        context = ContextBuilder()
        llm = config.llm
        selector = ToolSelector(
            provider,
            context=context,
            model=llm.model,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        )
        driver = ConversationDriver(
            provider,
            registry,
            context=context,
            model=llm.model,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        )
        return cls(registry, selector, driver, settle_delay=config.tool_server.settle_delay)

    async def start(self) -> ToolCatalog:
        """Connect to the tool server, wait for it to settle and fetch the catalog."""
        await self.registry.connect()
        if self.settle_delay > 0:
            logger.info(f"Waiting {self.settle_delay:.1f}s for the tool server to settle")
            await asyncio.sleep(self.settle_delay)
        self.catalog = await self.registry.list_tools()
        return self.catalog

    async def process_query(self, query: str) -> str:
        """Select the relevant tools for `query`, then run the conversation."""
        logger.info(f"Processing query: {query!r}")
        reduced = await self.selector.select(query, self.catalog)
        return await self.driver.run(query, reduced)

    async def close(self) -> None:
        """Close the tool server connection exactly once."""
        if self._closed:
            return
        self._closed = True
        await self.registry.close()
        logger.info("Session closed")

    async def __aenter__(self) -> ChatSession:
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
