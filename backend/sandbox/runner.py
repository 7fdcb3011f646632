"""Room code runner with process isolation.

Each execution happens in a fresh child process so a runaway script can be
killed when it exceeds its wall-clock budget. Static checks live in
sandbox.security.
"""

import ast
import multiprocessing
import time
from dataclasses import dataclass, field
from multiprocessing.connection import Connection

from common.logging import get_logger
from sandbox.console import Console
from sandbox.security import create_sandbox_globals, validate_code

logger = get_logger(__name__)

NO_OUTPUT = "no output produced"

ENTRYPOINT_NAME = "__room_main__"
SOURCE_FILENAME = "<room>"


@dataclass
class ExecutionResult:
    """Result of code execution.

    Either ``output`` (on success) or ``error`` (on failure) is meaningful,
    never both.
    """

    success: bool
    output: str = ""
    error: str | None = None
    error_type: str | None = None
    execution_time_ms: float = 0.0
    timed_out: bool = False
    security_violations: list[dict] = field(default_factory=list)

    @property
    def diagnostic(self) -> str:
        """Human readable failure description, e.g. ``NameError: name 'x' is not defined``."""
        if self.error_type:
            return f"{self.error_type}: {self.error}"
        return self.error or ""


def compile_program(code: str):
    """Compile room code as the body of a zero-argument function.

    The statements are grafted into ``def __room_main__(): ...`` followed by
    a call, so ``return`` ends the script and names are function locals.
    Line numbers in tracebacks still match the submitted text.
    """
    tree = ast.parse(code, filename=SOURCE_FILENAME)
    program = ast.parse(f"def {ENTRYPOINT_NAME}():\n    pass\n{ENTRYPOINT_NAME}()\n")
    if tree.body:
        program.body[0].body = tree.body
    ast.fix_missing_locations(program)
    return compile(program, SOURCE_FILENAME, "exec")


def _execute_in_sandbox(code: str, conn: Connection) -> None:
    """Execute code against a fresh console and send the result back.

    This function runs in a separate process.
    """
    console = Console()
    start_time = time.perf_counter()

    try:
        exec(compile_program(code), create_sandbox_globals(console))  # noqa: S102
        output = console.output
        result = ExecutionResult(
            success=True,
            output=NO_OUTPUT if output is None else output,
        )
    # User code may raise anything, including SystemExit
    except BaseException as e:  # noqa: BLE001
        result = ExecutionResult(
            success=False,
            error=str(e),
            error_type=type(e).__name__,
        )

    result.execution_time_ms = (time.perf_counter() - start_time) * 1000
    try:
        conn.send(result)
    finally:
        conn.close()


def _reap(process: multiprocessing.process.BaseProcess, stuck: bool = False) -> None:
    """Make sure the child is gone, escalating from join to kill.

    A child that already overran its budget is terminated straight away.
    """
    if not stuck:
        process.join(timeout=1.0)
    if process.is_alive():
        process.terminate()
        process.join(timeout=1.0)

    if process.is_alive():
        process.kill()
        process.join()


def execute_code(code: str, timeout_seconds: float = 5.0) -> ExecutionResult:
    """Execute room code in an isolated process.

    Args:
        code: The Python source code to execute.
        timeout_seconds: Maximum wall-clock execution time in seconds.

    Returns:
        ExecutionResult with the captured output or the failure reason.
    """
    try:
        violations = validate_code(code)
    except SyntaxError as e:
        return ExecutionResult(
            success=False,
            error=f"Line {e.lineno}: {e.msg}",
            error_type="SyntaxError",
        )

    if violations:
        return ExecutionResult(
            success=False,
            error="; ".join(f"line {v.line}: {v.message}" for v in violations),
            error_type="SecurityError",
            security_violations=[
                {
                    "line": v.line,
                    "column": v.column,
                    "message": v.message,
                }
                for v in violations
            ],
        )

    ctx = multiprocessing.get_context("spawn")
    parent_conn, child_conn = ctx.Pipe(duplex=False)
    process = ctx.Process(
        target=_execute_in_sandbox,
        args=(code, child_conn),
        daemon=True,
    )

    start_time = time.perf_counter()
    process.start()
    # Only the child may hold the write end, so a dead child reads as EOF
    child_conn.close()

    timed_out = False
    try:
        if not parent_conn.poll(timeout_seconds):
            timed_out = True
            logger.warning(f"Execution timed out after {timeout_seconds} seconds")
            return ExecutionResult(
                success=False,
                error=f"Execution timed out after {timeout_seconds} seconds",
                error_type="TimeoutError",
                execution_time_ms=(time.perf_counter() - start_time) * 1000,
                timed_out=True,
            )

        try:
            return parent_conn.recv()
        except EOFError:
            logger.error(f"Sandbox process exited without a result (exit code {process.exitcode})")
            return ExecutionResult(
                success=False,
                error="Failed to retrieve execution result",
                error_type="InternalError",
            )
    finally:
        parent_conn.close()
        _reap(process, stuck=timed_out)
