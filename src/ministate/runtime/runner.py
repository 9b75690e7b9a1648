"""Builder that wires settings, adapters and a context, then runs an app."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from typing import Any

from ministate.adapters.base import FormatAdapter
from ministate.config import Settings
from ministate.domain.strategies import ImportStrategy, get_strategy
from ministate.observability import bound, configure_logging
from ministate.registry import AdapterFactoryTable, AdapterRegistry, default_factory_table
from ministate.runtime.app import MiniApp
from ministate.service_layer.context import AppContext


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class AppRunner:
    """Configure and run a ``MiniApp``.

    Usage:
        exit_code = (
            AppRunner.for_app(CounterApp)
            .with_record_type(CounterState)
            .with_formats("json", "csv")
            .with_resources_path("data")
            .named("Counter")
            .run()
        )

    Precedence for each setting: command line, then builder, then
    ``MINISTATE_*`` environment variables, then defaults.
    """

    def __init__(self, app_cls: type[MiniApp]) -> None:
        self.app_cls = app_cls
        self.app_name: str | None = None
        self.record_type: Any = dict
        self.adapters: list[FormatAdapter[Any]] = []
        self.format_names: list[str] = []
        self.factory_table: AdapterFactoryTable = default_factory_table()
        self.resources_path: str | None = None
        self.strategy: ImportStrategy | None = None
        self.settings: Settings | None = None

    @classmethod
    def for_app(cls, app_cls: type[MiniApp]) -> AppRunner:
        return cls(app_cls)

    def named(self, app_name: str) -> AppRunner:
        self.app_name = app_name
        return self

    def with_record_type(self, record_type: Any) -> AppRunner:
        self.record_type = record_type
        return self

    def with_adapters(self, *adapters: FormatAdapter[Any]) -> AppRunner:
        self.adapters.extend(adapters)
        return self

    def with_formats(self, *format_names: str) -> AppRunner:
        """Add built-in adapters by format name, built for the record type."""
        self.format_names.extend(format_names)
        return self

    def with_factory_table(self, table: AdapterFactoryTable) -> AppRunner:
        self.factory_table = table
        return self

    def with_resources_path(self, resources_path: str) -> AppRunner:
        self.resources_path = resources_path
        return self

    def with_strategy(self, strategy: ImportStrategy | str) -> AppRunner:
        self.strategy = get_strategy(strategy) if isinstance(strategy, str) else strategy
        return self

    def with_settings(self, settings: Settings) -> AppRunner:
        self.settings = settings
        return self

    def resolve_app_name(self, settings: Settings) -> str:
        if self.app_name:
            return self.app_name
        if "app_name" in settings.model_fields_set:
            return settings.app_name
        return self.app_cls.__name__

    def build_registry(self, app_name: str) -> AdapterRegistry:
        """Register format-name adapters first so explicit adapters override them."""
        registry = AdapterRegistry()
        for format_name in self.format_names:
            registry.register_format(app_name, format_name, self.factory_table.create(format_name, self.record_type))
        for adapter in self.adapters:
            registry.register(app_name, adapter)
        return registry

    def build_context(self, settings: Settings, resources_path: str | None = None) -> AppContext:
        app_name = self.resolve_app_name(settings)
        return AppContext(
            app_name,
            self.build_registry(app_name),
            resources_path=resources_path or self.resources_path or settings.get_resources_path(),
            default_strategy=self.strategy or get_strategy(settings.default_strategy),
        )

    def parse_args(self, argv: Sequence[str] | None) -> tuple[argparse.Namespace, list[str]]:
        parser = argparse.ArgumentParser(prog=self.app_name or self.app_cls.__name__, add_help=False)
        parser.add_argument("--resources-path", help="Base directory for data files")
        parser.add_argument("--log-level", help="Logging level (debug, info, warning, error)")
        parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON log lines")
        return parser.parse_known_args(list(argv) if argv is not None else [])

    def run(self, argv: Sequence[str] | None = None) -> int:
        """Build the context and run initialize -> run -> shutdown.

        Errors from any phase go to ``app.on_error``. An unhandled error in
        ``initialize`` stops the lifecycle; after an unhandled error in ``run``
        ``shutdown`` still executes.

        Returns:
            0 when every phase succeeded or its error was handled, 1 otherwise
        """
        args, remaining = self.parse_args(argv)
        settings = self.settings or Settings()

        configure_logging(
            level=args.log_level or settings.log_level,
            json_output=args.json_logs if args.json_logs is not None else settings.json_logs,
            logger_levels=settings.logger_levels,
        )

        context = self.build_context(settings, args.resources_path)
        with bound(app=context.app_name):
            return self._run_lifecycle(self.app_cls(context, remaining))

    def _run_lifecycle(self, app: MiniApp) -> int:
        context = app.context
        logger.info(
            "Starting %s (formats: %s, resources: %s)",
            context.app_name,
            ", ".join(context.get_supported_formats()) or "none",
            context.resources_path,
        )

        if not self._run_phase(app, "initialize"):
            return EXIT_FAILURE
        run_ok = self._run_phase(app, "run")
        shutdown_ok = self._run_phase(app, "shutdown")

        exit_code = EXIT_OK if run_ok and shutdown_ok else EXIT_FAILURE
        logger.info("%s finished with exit code %d", context.app_name, exit_code)
        return exit_code

    def _run_phase(self, app: MiniApp, phase: str) -> bool:
        with bound(phase=phase):
            try:
                getattr(app, phase)()
            except Exception as err:
                return app.on_error(phase, err)
        return True
