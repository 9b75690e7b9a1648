"""Base class for applications driven by ``AppRunner``."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, ClassVar

from ministate.exceptions import DataIOError


if TYPE_CHECKING:
    from ministate.service_layer.context import AppContext


logger = logging.getLogger(__name__)


class MiniApp(ABC):
    """Application with initialize -> run -> shutdown hooks.

    Subclasses implement ``run`` and use ``self.context`` for state access.
    Set ``autoload`` / ``autosave`` to format names to have the default
    ``initialize`` import and the default ``shutdown`` export the records.

    Example:
        class CounterApp(MiniApp):
            autoload = ("json",)
            autosave = ("json",)

            def run(self) -> None:
                counters = self.context.get_data() or [CounterState()]
                counters[0].value += 1
                self.context.set_data(counters)
    """

    autoload: ClassVar[tuple[str, ...]] = ()
    autosave: ClassVar[tuple[str, ...]] = ()

    def __init__(self, context: AppContext, argv: list[str] | None = None) -> None:
        self.context = context
        self.argv = list(argv or [])

    def initialize(self) -> None:
        """Load saved records. A missing or unreadable file leaves the data empty."""
        for format_name in self.autoload:
            try:
                self.context.import_data(format_name)
            except DataIOError as err:
                logger.info("No saved %s data for %s: %s", format_name, self.context.app_name, err)

    @abstractmethod
    def run(self) -> None:
        """Application logic."""
        raise NotImplementedError

    def shutdown(self) -> None:
        """Persist records in every ``autosave`` format."""
        for format_name in self.autosave:
            self.context.export_data(format_name)

    def on_error(self, phase: str, error: Exception) -> bool:
        """Handle an error raised during ``phase``.

        Returns:
            True when the error is handled and the lifecycle should continue
        """
        logger.error("%s failed during %s: %s", self.context.app_name, phase, error, exc_info=error)
        return False
