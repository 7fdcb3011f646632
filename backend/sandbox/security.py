"""Builtin whitelist and AST validation for sandboxed room code."""

import ast
import builtins
from dataclasses import dataclass

from sandbox.console import Console


# =============================================================================
# BLOCKED NAMES - Calls that would reach host capabilities
# =============================================================================
BLOCKED_BUILTINS: frozenset[str] = frozenset(
    {
        "eval",
        "exec",
        "compile",
        "open",
        "input",
        "__import__",
        "globals",
        "locals",
        "vars",
        "dir",
        "getattr",
        "setattr",
        "delattr",
        "hasattr",
        "breakpoint",
        "help",
        "memoryview",
        "exit",
        "quit",
    }
)

# Attributes that lead from a plain object back to frames, globals or classes
BLOCKED_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "__class__",
        "__bases__",
        "__base__",
        "__subclasses__",
        "__mro__",
        "__globals__",
        "__code__",
        "__closure__",
        "__builtins__",
        "__import__",
        "__dict__",
        "__traceback__",
        "__self__",
        "__func__",
        "__getattribute__",
        "__reduce__",
        "__reduce_ex__",
        "tb_frame",
        "tb_next",
        "f_back",
        "f_globals",
        "f_locals",
        "f_builtins",
        "gi_frame",
        "gi_code",
        "cr_frame",
        "ag_frame",
    }
)

# =============================================================================
# SAFE BUILTINS - Explicit whitelist of pure computation builtins
# =============================================================================
SAFE_BUILTINS: dict = {
    # Constants
    "True": True,
    "False": False,
    "None": None,
    # Type constructors
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "bytes": bytes,
    "bytearray": bytearray,
    "object": object,
    "complex": complex,
    # Built-in functions (safe subset)
    "abs": abs,
    "all": all,
    "any": any,
    "ascii": ascii,
    "bin": bin,
    "callable": callable,
    "chr": chr,
    "divmod": divmod,
    "enumerate": enumerate,
    "filter": filter,
    "format": format,
    "hash": hash,
    "hex": hex,
    "isinstance": isinstance,
    "issubclass": issubclass,
    "iter": iter,
    "len": len,
    "map": map,
    "max": max,
    "min": min,
    "next": next,
    "oct": oct,
    "ord": ord,
    "pow": pow,
    "range": range,
    "repr": repr,
    "reversed": reversed,
    "round": round,
    "slice": slice,
    "sorted": sorted,
    "sum": sum,
    "zip": zip,
    # Class-related
    "property": property,
    "staticmethod": staticmethod,
    "classmethod": classmethod,
    "super": super,
    # Exceptions
    "Exception": Exception,
    "TypeError": TypeError,
    "ValueError": ValueError,
    "KeyError": KeyError,
    "IndexError": IndexError,
    "AttributeError": AttributeError,
    "RuntimeError": RuntimeError,
    "StopIteration": StopIteration,
    "ZeroDivisionError": ZeroDivisionError,
    "OverflowError": OverflowError,
    "AssertionError": AssertionError,
    "NotImplementedError": NotImplementedError,
    "RecursionError": RecursionError,
    "NameError": NameError,
    "ArithmeticError": ArithmeticError,
    "LookupError": LookupError,
    "UnicodeError": UnicodeError,
}

SANDBOX_MODULE_NAME = "__room__"


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def create_sandbox_globals(console: Console) -> dict:
    """Build the global namespace for one execution.

    The console's ``log`` is the only capability handed out. It is reachable
    as ``log``, ``print`` and ``console.log``.

    Args:
        console: Fresh capture object for this execution.

    Returns:
        A dictionary to pass as globals to ``exec()``.
    """
    safe_builtins = SAFE_BUILTINS.copy()
    safe_builtins["print"] = console.log
    # Needed for class statements
    safe_builtins["__build_class__"] = builtins.__build_class__
    safe_builtins["__name__"] = SANDBOX_MODULE_NAME

    return {
        "__builtins__": safe_builtins,
        "__name__": SANDBOX_MODULE_NAME,
        "__doc__": None,
        "console": console,
        "log": console.log,
    }


@dataclass
class SecurityViolation:
    """Represents a security violation in user code."""

    line: int
    column: int
    message: str


class SecurityValidator(ast.NodeVisitor):
    """AST visitor that checks for security violations."""

    def __init__(self) -> None:
        self.violations: list[SecurityViolation] = []

    def _flag(self, node: ast.AST, message: str) -> None:
        self.violations.append(
            SecurityViolation(
                line=getattr(node, "lineno", 1),
                column=getattr(node, "col_offset", 0),
                message=message,
            )
        )

    def visit_Import(self, node: ast.Import) -> None:
        """Module imports are not available inside a room."""
        for alias in node.names:
            self._flag(node, f"Import of '{alias.name}' is not allowed.")
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        """Check from...import statements."""
        self._flag(node, f"Import from '{node.module or '.'}' is not allowed.")
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        """Check for blocked function calls."""
        if isinstance(node.func, ast.Name) and node.func.id in BLOCKED_BUILTINS:
            self._flag(node, f"Use of '{node.func.id}()' is not allowed.")
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        """Check for attribute access that escapes the sandbox."""
        if node.attr in BLOCKED_ATTRIBUTES:
            self._flag(node, f"Access to '{node.attr}' is not allowed.")
        self.generic_visit(node)

    def visit_MatchClass(self, node: ast.MatchClass) -> None:
        """Class patterns read attributes by name, e.g. ``case object(__class__=t)``."""
        for attr in node.kwd_attrs:
            if attr in BLOCKED_ATTRIBUTES or _is_dunder(attr):
                self._flag(node, f"Access to '{attr}' is not allowed.")
        self.generic_visit(node)


def validate_code(code: str) -> list[SecurityViolation]:
    """Validate code for security violations.

    Args:
        code: The Python source code to validate.

    Returns:
        List of security violations found, empty if code is safe.

    Raises:
        SyntaxError: If code cannot be parsed.
    """
    tree = ast.parse(code)
    validator = SecurityValidator()
    validator.visit(tree)
    return validator.violations
