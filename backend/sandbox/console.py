"""Capture-only logging primitive exposed to sandboxed code."""


class Console:
    """Accumulates everything sandboxed code logs.

    A fresh instance is created for every execution; it is the only
    capability the evaluated code receives.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self.calls = 0

    def log(self, *args: object, sep: str = " ") -> None:
        """Append the stringified arguments, joined by ``sep``.

        Successive calls are concatenated without any separator.
        """
        self._chunks.append(sep.join(str(arg) for arg in args))
        self.calls += 1

    @property
    def output(self) -> str | None:
        """Captured text, or None if ``log`` was never called."""
        if not self.calls:
            return None
        return "".join(self._chunks)
