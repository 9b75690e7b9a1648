"""Unit tests for MiniApp lifecycle and AppRunner wiring."""

from pathlib import Path

import pytest

from ministate.adapters import JsonAdapter, ModelCsvAdapter
from ministate.config import Settings
from ministate.domain.strategies import AppendStrategy, ReplaceStrategy, SkipExistingStrategy
from ministate.exceptions import UnsupportedFormatError, ValidationError
from ministate.registry import AdapterFactoryTable
from ministate.runtime import EXIT_FAILURE, EXIT_OK, AppRunner, MiniApp
from tests.fixtures.records import Counter


pytestmark = pytest.mark.unit


class RecordingApp(MiniApp):
    """Records every lifecycle call; failures are configured per class."""

    fail_in: tuple[str, ...] = ()
    handle_errors = False
    instances: list["RecordingApp"] = []

    def __init__(self, context, argv=None):
        super().__init__(context, argv)
        self.calls: list[str] = []
        self.errors: list[tuple[str, str]] = []
        type(self).instances.append(self)

    def _maybe_fail(self, phase: str) -> None:
        self.calls.append(phase)
        if phase in self.fail_in:
            raise RuntimeError(f"{phase} broke")

    def initialize(self) -> None:
        self._maybe_fail("initialize")
        super().initialize()

    def run(self) -> None:
        self._maybe_fail("run")

    def shutdown(self) -> None:
        self._maybe_fail("shutdown")
        super().shutdown()

    def on_error(self, phase: str, error: Exception) -> bool:
        self.errors.append((phase, str(error)))
        return self.handle_errors


class CounterApp(MiniApp):
    autoload = ("json",)
    autosave = ("json",)

    def run(self) -> None:
        counters = self.context.get_data() or [Counter()]
        counters[0].value += 1
        self.context.set_data(counters)


def _last_app(app_cls: type[RecordingApp]) -> RecordingApp:
    return app_cls.instances[-1]


@pytest.fixture
def recording_app():
    class App(RecordingApp):
        instances: list[RecordingApp] = []

    return App


@pytest.fixture(autouse=True)
def no_log_reconfiguration(monkeypatch):
    monkeypatch.setattr("ministate.runtime.runner.configure_logging", lambda **kwargs: None)


class TestLifecycle:
    def test_hooks_run_in_order(self, recording_app, tmp_path: Path):
        exit_code = AppRunner.for_app(recording_app).with_resources_path(str(tmp_path)).run()

        assert exit_code == EXIT_OK
        assert _last_app(recording_app).calls == ["initialize", "run", "shutdown"]

    def test_initialize_failure_stops_lifecycle(self, recording_app, tmp_path: Path):
        recording_app.fail_in = ("initialize",)

        exit_code = AppRunner.for_app(recording_app).with_resources_path(str(tmp_path)).run()

        app = _last_app(recording_app)
        assert exit_code == EXIT_FAILURE
        assert app.calls == ["initialize"]
        assert app.errors == [("initialize", "initialize broke")]

    def test_run_failure_still_runs_shutdown(self, recording_app, tmp_path: Path):
        recording_app.fail_in = ("run",)

        exit_code = AppRunner.for_app(recording_app).with_resources_path(str(tmp_path)).run()

        app = _last_app(recording_app)
        assert exit_code == EXIT_FAILURE
        assert app.calls == ["initialize", "run", "shutdown"]
        assert app.errors == [("run", "run broke")]

    def test_shutdown_failure_sets_exit_code(self, recording_app, tmp_path: Path):
        recording_app.fail_in = ("shutdown",)

        exit_code = AppRunner.for_app(recording_app).with_resources_path(str(tmp_path)).run()

        assert exit_code == EXIT_FAILURE
        assert _last_app(recording_app).errors == [("shutdown", "shutdown broke")]

    def test_handled_errors_continue_lifecycle(self, recording_app, tmp_path: Path):
        recording_app.fail_in = ("initialize", "run")
        recording_app.handle_errors = True

        exit_code = AppRunner.for_app(recording_app).with_resources_path(str(tmp_path)).run()

        assert exit_code == EXIT_OK
        assert _last_app(recording_app).calls == ["initialize", "run", "shutdown"]

    def test_default_on_error_reports_failure(self, tmp_path: Path, caplog):
        class Broken(MiniApp):
            def run(self) -> None:
                raise RuntimeError("no luck")

        with caplog.at_level("ERROR"):
            exit_code = AppRunner.for_app(Broken).with_resources_path(str(tmp_path)).run()

        assert exit_code == EXIT_FAILURE
        assert "Broken failed during run: no luck" in caplog.text

    def test_unknown_arguments_reach_the_app(self, recording_app, tmp_path: Path):
        AppRunner.for_app(recording_app).run(["--resources-path", str(tmp_path), "--verbose", "extra"])

        assert _last_app(recording_app).argv == ["--verbose", "extra"]


class TestAutoloadAutosave:
    def test_first_run_starts_empty_and_saves(self, tmp_path: Path):
        runner = AppRunner.for_app(CounterApp).with_record_type(Counter).with_formats("json")

        assert runner.with_resources_path(str(tmp_path)).run() == EXIT_OK

        assert (tmp_path / "CounterApp.json").is_file()

    def test_state_survives_between_runs(self, tmp_path: Path):
        def run_once() -> int:
            return (
                AppRunner.for_app(CounterApp)
                .named("Counter")
                .with_record_type(Counter)
                .with_formats("json")
                .with_resources_path(str(tmp_path))
                .run()
            )

        run_once()
        run_once()
        run_once()

        runner = AppRunner.for_app(CounterApp).named("Counter").with_record_type(Counter).with_formats("json")
        context = runner.build_context(Settings(), str(tmp_path))  # type: ignore[call-arg]
        context.import_data("json")
        assert context.get_data() == [Counter(3)]

    def test_corrupt_autoload_file_is_reported(self, tmp_path: Path):
        (tmp_path / "CounterApp.json").write_text("not json", encoding="utf-8")

        runner = AppRunner.for_app(CounterApp).with_record_type(Counter).with_formats("json")

        exit_code = runner.with_resources_path(str(tmp_path)).run()

        assert exit_code == EXIT_FAILURE
        assert (tmp_path / "CounterApp.json").read_text(encoding="utf-8") == "not json"

    def test_autosave_without_adapter_fails(self, tmp_path: Path):
        class Unwired(MiniApp):
            autosave = ("json",)

            def run(self) -> None:
                return None

        assert AppRunner.for_app(Unwired).with_resources_path(str(tmp_path)).run() == EXIT_FAILURE


class TestBuilder:
    def test_app_name_precedence(self, monkeypatch):
        runner = AppRunner.for_app(CounterApp)
        assert runner.resolve_app_name(Settings()) == "CounterApp"  # type: ignore[call-arg]

        monkeypatch.setenv("MINISTATE_APP_NAME", "FromEnv")
        assert runner.resolve_app_name(Settings()) == "FromEnv"  # type: ignore[call-arg]

        assert runner.named("Explicit").resolve_app_name(Settings()) == "Explicit"  # type: ignore[call-arg]

    def test_resources_path_precedence(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("MINISTATE_RESOURCES_PATH", "from-env")
        runner = AppRunner.for_app(CounterApp)

        assert runner.build_context(Settings()).resources_path == "from-env"  # type: ignore[call-arg]

        runner.with_resources_path("from-builder")
        assert runner.build_context(Settings()).resources_path == "from-builder"  # type: ignore[call-arg]
        assert runner.build_context(Settings(), "from-cli").resources_path == "from-cli"  # type: ignore[call-arg]

    def test_strategy_precedence(self, monkeypatch):
        monkeypatch.setenv("MINISTATE_DEFAULT_STRATEGY", "append")
        runner = AppRunner.for_app(CounterApp)

        assert isinstance(runner.build_context(Settings()).default_strategy, AppendStrategy)  # type: ignore[call-arg]

        runner.with_strategy("skip-existing")
        strategy = runner.build_context(Settings()).default_strategy  # type: ignore[call-arg]
        assert isinstance(strategy, SkipExistingStrategy)

        runner.with_strategy(ReplaceStrategy())
        assert isinstance(runner.build_context(Settings()).default_strategy, ReplaceStrategy)  # type: ignore[call-arg]

    def test_with_strategy_rejects_unknown_name(self):
        with pytest.raises(ValidationError):
            AppRunner.for_app(CounterApp).with_strategy("upsert")

    def test_with_formats_builds_adapters_for_record_type(self):
        runner = AppRunner.for_app(CounterApp).with_record_type(Counter).with_formats("json", "CSV")

        registry = runner.build_registry("Counter")

        assert registry.supported_formats("Counter") == {"json", "csv"}
        csv_adapter = registry.lookup("Counter", "csv")
        assert isinstance(csv_adapter, ModelCsvAdapter)
        assert csv_adapter.record_type is Counter

    def test_explicit_adapters_override_format_names(self):
        explicit = JsonAdapter(Counter)
        runner = AppRunner.for_app(CounterApp).with_formats("json").with_adapters(explicit)

        assert runner.build_registry("Counter").lookup("Counter", "json") is explicit

    def test_unknown_format_name_fails_fast(self):
        runner = AppRunner.for_app(CounterApp).with_formats("xml")

        with pytest.raises(UnsupportedFormatError):
            runner.build_registry("Counter")

    def test_custom_factory_table(self):
        table = AdapterFactoryTable({"notes": JsonAdapter})
        runner = AppRunner.for_app(CounterApp).with_factory_table(table).with_formats("notes")

        assert runner.build_registry("Counter").supports("Counter", "notes")

    def test_explicit_settings_are_used(self, recording_app, tmp_path: Path):
        settings = Settings(app_name="Configured", resources_path=str(tmp_path))  # type: ignore[call-arg]

        AppRunner.for_app(recording_app).with_settings(settings).run()

        context = _last_app(recording_app).context
        assert context.app_name == "Configured"
        assert context.resources_path == str(tmp_path)

    def test_cli_flags_override_settings(self, monkeypatch, recording_app, tmp_path: Path):
        captured = {}
        monkeypatch.setattr("ministate.runtime.runner.configure_logging", lambda **kwargs: captured.update(kwargs))

        AppRunner.for_app(recording_app).run(["--log-level", "debug", "--json-logs", "--resources-path", str(tmp_path)])

        assert captured["level"] == "debug"
        assert captured["json_output"] is True
        assert _last_app(recording_app).context.resources_path == str(tmp_path)
