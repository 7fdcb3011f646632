"""Execution service for running room code."""

import asyncio

from common.config import settings
from common.logging import get_logger
from sandbox import ExecutionResult, execute_code

logger = get_logger(__name__)


class ExecutorService:
    """Service for executing room code without blocking the event loop."""

    def __init__(
        self,
        timeout_seconds: float | None = None,
        max_code_size_bytes: int | None = None,
    ):
        """Initialize the executor service.

        Args:
            timeout_seconds: Maximum execution time. Defaults to config value.
            max_code_size_bytes: Largest accepted source. Defaults to config value.
        """
        self.default_timeout = timeout_seconds or settings.execution_timeout_seconds
        self.max_code_size_bytes = max_code_size_bytes or settings.max_code_size_bytes

    async def execute(
        self,
        code: str,
        timeout_seconds: float | None = None,
    ) -> ExecutionResult:
        """Execute room code in the sandbox.

        The blocking sandbox call runs on a worker thread, so a slow script
        only delays the request that submitted it.

        Args:
            code: The Python source code to execute.
            timeout_seconds: Maximum execution time (overrides default).

        Returns:
            ExecutionResult with output or error information.
        """
        timeout = timeout_seconds or self.default_timeout

        # Validate code size
        if len(code.encode("utf-8")) > self.max_code_size_bytes:
            return ExecutionResult(
                success=False,
                error=f"Code exceeds maximum size of {self.max_code_size_bytes} bytes",
                error_type="ValidationError",
            )

        result = await asyncio.to_thread(execute_code, code, timeout)
        logger.info(
            f"Execution finished: success={result.success} "
            f"error_type={result.error_type} time_ms={result.execution_time_ms:.1f}"
        )
        return result


# Singleton instance for dependency injection
_executor_service: ExecutorService | None = None


def get_executor_service() -> ExecutorService:
    """Get the executor service instance (dependency injection)."""
    global _executor_service
    if _executor_service is None:
        _executor_service = ExecutorService()
    return _executor_service
