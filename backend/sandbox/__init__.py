"""Sandboxed execution of room code.

This package runs untrusted Python text with:
- A capture-only logging primitive as the single capability
- A whitelist of pure computation builtins, no imports
- AST validation before anything runs
- A fresh child process per execution with a wall-clock timeout
"""

from sandbox.console import Console
from sandbox.runner import NO_OUTPUT, ExecutionResult, execute_code
from sandbox.security import (
    BLOCKED_BUILTINS,
    SAFE_BUILTINS,
    SecurityViolation,
    validate_code,
)

__all__ = [
    "execute_code",
    "ExecutionResult",
    "Console",
    "NO_OUTPUT",
    "validate_code",
    "SecurityViolation",
    "BLOCKED_BUILTINS",
    "SAFE_BUILTINS",
]
