"""Sandbox that runs uploaded workflow files.

Execution is simulated: after a fixed delay the input is echoed back. The
timeout and error translation are real, so swapping in an isolated runner
keeps the engine's failure semantics.
"""

import asyncio
import time
from datetime import UTC, datetime
from typing import Any

from src.workflowkart.core.config import get_settings
from src.workflowkart.core.exceptions import SandboxExecutionError, SandboxTimeoutError
from src.workflowkart.core.logging import get_logger

logger = get_logger(__name__)


class SimulatedSandboxRunner:
    def __init__(
        self,
        timeout_seconds: float | None = None,
        simulated_delay_seconds: float | None = None,
    ):
        settings = get_settings()
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.sandbox_timeout_seconds
        )
        self.simulated_delay_seconds = (
            simulated_delay_seconds
            if simulated_delay_seconds is not None
            else settings.sandbox_simulated_delay_seconds
        )

    async def run(self, workflow_file_ref: str, input: dict[str, Any] | None) -> dict[str, Any]:
        """Run a workflow file under the configured timeout.

        Raises:
            SandboxTimeoutError: The run exceeded timeout_seconds.
            SandboxExecutionError: Anything else went wrong; message preserved.
        """
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await self._execute(workflow_file_ref, input)
        except TimeoutError as e:
            logger.warning(
                "Workflow execution timed out",
                workflow_file=workflow_file_ref,
                timeout_seconds=self.timeout_seconds,
            )
            raise SandboxTimeoutError(
                f"Workflow execution timed out after {self.timeout_seconds:g}s"
            ) from e
        except SandboxExecutionError:
            raise
        except Exception as e:
            raise SandboxExecutionError(str(e) or type(e).__name__) from e

    async def _execute(
        self, workflow_file_ref: str, input: dict[str, Any] | None
    ) -> dict[str, Any]:
        # TODO: fetch the stored file and run it in an isolated worker process
        await asyncio.sleep(self.simulated_delay_seconds)

        logger.info("Workflow executed with input", workflow_file=workflow_file_ref, input=input)
        return {
            "success": True,
            "data": input or {},
            "timestamp": datetime.now(UTC).isoformat(),
            "workflowFile": workflow_file_ref,
            "executionTime": int(time.time() * 1000),
        }
