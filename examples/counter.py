"""Counter that keeps its value between runs in ``resources/Counter.json``.

Usage:
    python examples/counter.py              # increment
    python examples/counter.py decrement
    python examples/counter.py reset --resources-path /tmp/counter
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import sys

from ministate import AppRunner, MiniApp


logger = logging.getLogger(__name__)

COMMANDS = ("increment", "decrement", "reset", "show")


@dataclass
class CounterState:
    value: int = 0


class CounterApp(MiniApp):
    autoload = ("json",)
    autosave = ("json",)

    def run(self) -> None:
        command = self.argv[0] if self.argv else "increment"
        if command not in COMMANDS:
            raise ValueError(f"Unknown command {command!r}, expected one of: {', '.join(COMMANDS)}")

        state = (self.context.get_data() or [CounterState()])[0]
        if command == "increment":
            state.value += 1
        elif command == "decrement":
            state.value -= 1
        elif command == "reset":
            state.value = 0

        self.context.set_data([state])
        logger.debug("Applied %s, counter is now %d", command, state.value)
        print(f"Counter: {state.value}")


def main(argv: Sequence[str] | None = None) -> int:
    return (
        AppRunner.for_app(CounterApp)
        .with_record_type(CounterState)
        .with_formats("json")
        .named("Counter")
        .run(argv)
    )


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
