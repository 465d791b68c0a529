"""Tool dispatcher: single calls, bounded parallel batches and the confirmation gate."""
import asyncio
import time
import logging
from typing import Any, Dict, List, Iterable

from models.action import ToolCall
from tools.base import (
    ConfirmationRequiredError,
    ToolExecutionContext,
    ToolNotFoundError,
    ToolRegistry,
    ToolResult,
)

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Runs registered tools with error isolation."""

    def __init__(self, registry: ToolRegistry, concurrency: int = 5):
        self.registry = registry
        self.concurrency = max(1, concurrency)

    async def dispatch(self, name: str, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        """Execute one tool. Never raises: failures come back as ``ok=False``."""
        tool = self.registry.get_tool(name)
        if tool is None:
            logger.warning(f"Tool not found: {name}")
            return ToolResult(ok=False, error=f"Unknown tool: {name}")

        tool_start = time.time()
        try:
            tool.validate_parameters(args)
            logger.info(f"Executing tool: {name}")
            result = await tool.execute(args, ctx)
        except ValueError as e:
            logger.error(f"Tool parameter validation failed ({name}): {e}")
            return ToolResult(ok=False, error=str(e))
        except Exception as e:
            logger.error(f"Tool execution error ({name}): {e}", exc_info=True)
            return ToolResult(ok=False, error=str(e) or type(e).__name__)

        execution_time_ms = int((time.time() - tool_start) * 1000)
        logger.info(f"Tool {name} completed in {execution_time_ms}ms (ok={result.ok})")
        return result

    async def dispatch_batch(self, calls: Iterable[ToolCall], ctx: ToolExecutionContext) -> List[dict]:
        """Execute calls concurrently and pair each result with its call id.

        One failing call never discards the results of the others.
        """
        calls = list(calls)
        if not calls:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _guarded(call: ToolCall) -> ToolResult:
            async with semaphore:
                return await self.dispatch(call.tool_name, call.args, ctx)

        raw_results = await asyncio.gather(*(_guarded(call) for call in calls), return_exceptions=True)

        results: List[dict] = []
        for call, res in zip(calls, raw_results):
            if isinstance(res, BaseException):
                logger.error(f"Tool {call.tool_name} raised unhandled exception: {res}")
                res = ToolResult(ok=False, error="An internal error occurred while executing this tool.")
            results.append({
                "tool_call_id": call.tool_call_id,
                "tool_name": call.tool_name,
                "result": res,
            })
        return results

    async def execute_direct(
        self,
        name: str,
        args: Dict[str, Any],
        ctx: ToolExecutionContext,
        confirm_mutating: bool = False,
    ) -> ToolResult:
        """Transport entry point: mutating tools need an explicit confirmation flag."""
        tool = self.registry.get_tool(name)
        if tool is None:
            raise ToolNotFoundError(name)
        if tool.mutating and not confirm_mutating:
            raise ConfirmationRequiredError(name)
        return await self.dispatch(name, args, ctx)
