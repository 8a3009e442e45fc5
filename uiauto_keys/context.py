# uiauto_keys/context.py
"""
@file context.py
@brief Stack of in-flight handle operations, appended to failure messages.

Every gesture, input call and wait on a testing handle runs inside
ActionContextManager.action(); a failure reported while the stack is
non-empty carries the trace, innermost operation first:

    Action trace (most recent first):
      X wait_for_text on Listing.items[1].title [4.01s]
      -> perform on Listing [4.02s]
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional, Tuple


@dataclass
class ActionContext:
    """One operation on a handle."""
    action_name: str
    target: Optional[str] = None
    identifiers: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=time.monotonic)
    parent: Optional[ActionContext] = None

    @property
    def description(self) -> str:
        if self.target:
            return f"{self.action_name} on {self.target}"
        return self.action_name

    @property
    def elapsed_time(self) -> float:
        return time.monotonic() - self.start_time

    def chain(self) -> List[ActionContext]:
        """This context followed by its enclosing ones."""
        result = []
        current: Optional[ActionContext] = self
        while current is not None:
            result.append(current)
            current = current.parent
        return result

    def format_trace(self) -> str:
        lines = ["Action trace (most recent first):"]
        for i, ctx in enumerate(self.chain()):
            marker = "  X " if i == 0 else "  -> "
            lines.append(f"{marker}{ctx.description} [{ctx.elapsed_time:.2f}s]")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form written to failure artifacts."""
        return {
            "action": self.action_name,
            "target": self.target,
            "identifiers": list(self.identifiers),
            "elapsed_s": round(self.elapsed_time, 3),
            "metadata": {
                k: v if isinstance(v, (str, int, float, bool, type(None))) else repr(v)
                for k, v in self.metadata.items()
            },
        }


class ActionContextManager:
    """Per-thread stack of ActionContext objects."""

    _local = threading.local()

    @classmethod
    def _stack(cls) -> List[ActionContext]:
        stack = getattr(cls._local, "stack", None)
        if stack is None:
            stack = cls._local.stack = []
        return stack

    @classmethod
    def current(cls) -> Optional[ActionContext]:
        stack = cls._stack()
        return stack[-1] if stack else None

    @classmethod
    @contextmanager
    def action(
        cls,
        action_name: str,
        target: Optional[str] = None,
        identifiers: Tuple[str, ...] = (),
        **metadata: Any,
    ) -> Generator[ActionContext, None, None]:
        """Track one handle operation for the duration of the block."""
        stack = cls._stack()
        context = ActionContext(
            action_name=action_name,
            target=target,
            identifiers=tuple(identifiers),
            metadata=metadata,
            parent=stack[-1] if stack else None,
        )
        stack.append(context)
        try:
            yield context
        finally:
            stack.pop()

    @classmethod
    def format_trace(cls) -> Optional[str]:
        """Trace of the current stack, or None outside any action."""
        current = cls.current()
        return current.format_trace() if current is not None else None

    @classmethod
    def clear(cls) -> None:
        """Drop every tracked context on this thread (test cleanup)."""
        cls._local.stack = []
