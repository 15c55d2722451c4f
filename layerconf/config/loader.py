"""Configuration loader with source ordering and state machine."""

import json
import time
import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

import structlog

from layerconf.config.cli_scanner import CliParseResult, scan_cli_args
from layerconf.config.constants import COMPONENT_CONFIG, SOURCE_FILE_PREFIX
from layerconf.config.env_scanner import scan_environment
from layerconf.config.errors import (
    ConfigError,
    DocumentParseError,
    FileUnreadableError,
    UnsupportedFormatError,
)
from layerconf.config.formats import detect_format, parse_ini_file
from layerconf.config.formats.flatteners import Flattener, probe_flatteners
from layerconf.config.models import (
    Assignment,
    FileFormat,
    LoadReport,
    ValidationResult,
)
from layerconf.config.state_machine import ConfigState, ConfigStateMachine
from layerconf.config.store import ConfigStore


logger = structlog.get_logger()


class ConfigLoader:
    """Populates a :class:`ConfigStore` from files, environment and CLI.

    Precedence is encoded by write order: files (in the order given), then
    environment variables, then command-line options. :meth:`load` runs the
    three steps in that order; the individual steps may also be called
    directly, in which case the caller owns the ordering.

    State transitions per step:
    UNLOADED/LOADED -> LOADING -> LOADED, and LOADED -> VALIDATED | INVALID
    on :meth:`validate`.
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        flatteners: Mapping[FileFormat, Flattener] | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            store: Store to populate.
            flatteners: JSON/YAML flatteners; probed once from the store's
                settings when omitted.
            run_id: Identifier bound to log records; generated when omitted.
        """
        self._store = store
        self._run_id = run_id or str(uuid.uuid4())
        self._state_machine = ConfigStateMachine()
        self._flatteners: dict[FileFormat, Flattener] = dict(
            flatteners
            if flatteners is not None
            else probe_flatteners(store.settings.flattener_backend)
        )
        self._config_files: list[str] = []
        self._load_duration_ms: float = 0.0
        self._last_report = LoadReport()
        self._log = logger.bind(run_id=self._run_id, component=COMPONENT_CONFIG)

        for file_format, flattener in self._flatteners.items():
            self._log.debug(
                "config_format_support",
                file_format=file_format.value,
                flattener=flattener.name,
                available=flattener.available,
            )

    @property
    def store(self) -> ConfigStore:
        """The store being populated."""
        return self._store

    @property
    def state(self) -> ConfigState:
        """Get the current loader state."""
        return self._state_machine.state

    @property
    def config_files(self) -> list[str]:
        """Files queued by ``--config-file`` options."""
        return list(self._config_files)

    @property
    def flatteners(self) -> dict[FileFormat, Flattener]:
        """Flatteners selected at construction."""
        return dict(self._flatteners)

    @property
    def load_duration_ms(self) -> float:
        """Duration of the last :meth:`load` call in milliseconds."""
        return self._load_duration_ms

    @property
    def last_report(self) -> LoadReport:
        """Report of the most recent loader step."""
        return self._last_report

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        """Wrap a loader step in LOADING -> LOADED transitions."""
        self._state_machine.transition(ConfigState.LOADING)
        self._log.debug("config_step_started", step=name, phase="LOADING")
        try:
            yield
        except Exception as e:
            self._state_machine.transition(ConfigState.FAILED)
            self._log.error("config_step_failed", step=name, phase="FAILED", error=str(e))
            raise
        self._state_machine.transition(ConfigState.LOADED)
        self._log.debug("config_step_completed", step=name, phase="LOADED")

    def _apply(self, assignments: Iterable[Assignment], report: LoadReport) -> None:
        for assignment in assignments:
            try:
                self._store.set(assignment.key, assignment.value, assignment.source)
            except ConfigError as e:
                report.errors.append(e)
                self._log.warning(
                    "config_assignment_rejected",
                    key=assignment.key,
                    source=assignment.source,
                    error=str(e),
                )
                continue
            report.keys_written += 1

    def _read_pairs(self, path: Path, report: LoadReport) -> list[tuple[str, str]]:
        """Parse a file into key/value pairs according to its format."""
        file_format = detect_format(path)

        if file_format is FileFormat.INI:
            return parse_ini_file(path)

        flattener = self._flatteners.get(file_format)
        try:
            if flattener is None:
                raise UnsupportedFormatError(str(path), file_format.value, "none")
            pairs = flattener.flatten(path)
        except UnsupportedFormatError as e:
            self._log.warning(
                "config_format_fallback",
                file_path=str(path),
                file_format=file_format.value,
                flattener=e.tool,
                fallback="ini",
            )
            report.fallbacks.append(str(path))
            return parse_ini_file(path)

        # Structured documents skip empty leaves
        return [(key, value) for key, value in pairs if value != ""]

    def _load_file(self, file_path: str | Path, report: LoadReport) -> None:
        path = Path(file_path)
        source = f"{SOURCE_FILE_PREFIX}{file_path}"

        try:
            is_file = path.is_file()
        except OSError as e:
            # ENAMETOOLONG, EACCES on a parent and similar
            report.files_skipped.append(str(file_path))
            report.errors.append(FileUnreadableError(str(file_path), f"unreadable ({e})"))
            self._log.warning("config_file_unreadable", file_path=str(file_path), error=str(e))
            return

        if not is_file:
            error = FileUnreadableError(str(file_path))
            report.files_skipped.append(str(file_path))
            report.errors.append(error)
            self._log.warning("config_file_unreadable", file_path=str(file_path))
            return

        self._log.debug(
            "loading_config_file",
            file_path=str(file_path),
            file_format=detect_format(path).value,
        )

        try:
            pairs = self._read_pairs(path, report)
        except DocumentParseError as e:
            report.errors.append(e)
            self._log.warning("config_document_parse_error", file_path=str(file_path), error=str(e))
            return
        except (OSError, UnicodeDecodeError) as e:
            report.files_skipped.append(str(file_path))
            report.errors.append(FileUnreadableError(str(file_path), f"unreadable ({e})"))
            self._log.warning("config_file_unreadable", file_path=str(file_path), error=str(e))
            return

        written_before = report.keys_written
        self._apply(
            (Assignment(key=key, value=value, source=source) for key, value in pairs),
            report,
        )
        report.files_loaded.append(str(file_path))
        self._log.info(
            "config_file_loaded",
            file_path=str(file_path),
            key_count=report.keys_written - written_before,
        )

    def load_from_files(self, paths: Iterable[str | Path]) -> LoadReport:
        """Load files in order; later files overwrite earlier ones.

        Missing or unreadable files are reported and skipped.

        Args:
            paths: Configuration file paths.

        Returns:
            LoadReport for this step.
        """
        report = LoadReport()
        with self._step("files"):
            for path in paths:
                if str(path):
                    self._load_file(path, report)
        self._last_report = report
        return report

    def load_from_env(self, environ: Mapping[str, str] | None = None) -> LoadReport:
        """Scan environment variables into the store.

        Args:
            environ: Variables to scan; defaults to ``os.environ``.

        Returns:
            LoadReport for this step.
        """
        report = LoadReport()
        with self._step("env"):
            assignments = scan_environment(
                self._store.overrides,
                environ,
                auto_transform=self._store.settings.auto_transform_keys,
            )
            self._apply(assignments, report)
        self._log.info("config_env_loaded", key_count=report.keys_written)
        self._last_report = report
        return report

    def _apply_flags(self, parsed: CliParseResult) -> None:
        for attribute, enabled in parsed.flags.items():
            setattr(self._store.settings, attribute, enabled)
            self._log.debug("config_flag_set", flag=attribute, enabled=enabled)

    def _scan_cli(self, argv: list[str]) -> CliParseResult:
        parsed = scan_cli_args(argv, self._store.overrides, self._store.settings)
        self._apply_flags(parsed)
        self._config_files.extend(parsed.config_files)
        return parsed

    def parse_cli_args(self, argv: list[str]) -> CliParseResult:
        """Scan CLI arguments and write recognised options immediately.

        ``--config-file`` paths are queued on :attr:`config_files` and not
        loaded here.

        Args:
            argv: Arguments without the program name.

        Returns:
            CliParseResult whose ``remaining`` tokens belong to the caller.
        """
        report = LoadReport()
        with self._step("cli"):
            parsed = self._scan_cli(argv)
            self._apply(parsed.assignments, report)
        report.remaining_args = list(parsed.remaining)
        self._log.info(
            "config_cli_loaded",
            key_count=report.keys_written,
            remaining_count=len(parsed.remaining),
        )
        self._last_report = report
        return parsed

    def load(
        self,
        files: Iterable[str | Path] = (),
        argv: list[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> LoadReport:
        """Load every source in precedence order: files, env, CLI.

        CLI arguments are scanned first without writing so that
        ``--config-file`` paths and module-control flags take effect before
        files and environment are read; their assignments are written last.

        Args:
            files: Configuration files, lowest precedence first.
            argv: Command-line arguments without the program name.
            environ: Environment mapping; defaults to ``os.environ``.

        Returns:
            Combined LoadReport, including the CLI tokens left for the caller.
        """
        start_time = time.perf_counter()
        report = LoadReport()

        parsed = CliParseResult()
        if argv:
            parsed = self._scan_cli(argv)

        all_files = [*files, *self._config_files]
        self._config_files.clear()
        report.merge(self.load_from_files(all_files))
        report.merge(self.load_from_env(environ))

        cli_report = LoadReport(remaining_args=list(parsed.remaining))
        with self._step("cli"):
            self._apply(parsed.assignments, cli_report)
        report.merge(cli_report)

        self._load_duration_ms = (time.perf_counter() - start_time) * 1000
        self._last_report = report
        self._log.info(
            "config_load_complete",
            files_loaded=len(report.files_loaded),
            files_skipped=len(report.files_skipped),
            keys_written=report.keys_written,
            key_count=len(self._store),
            error_count=len(report.errors),
            config_load_duration_ms=self._load_duration_ms,
        )
        return report

    def validate(self) -> ValidationResult:
        """Validate the store and record the outcome in the state machine."""
        result = self._store.validate()
        self._state_machine.transition(
            ConfigState.VALIDATED if result.ok else ConfigState.INVALID
        )
        return result

    def get_load_summary(self) -> dict[str, object]:
        """Get a summary of the most recent load.

        Returns:
            Dictionary with load summary.
        """
        report = self._last_report
        return {
            "run_id": self._run_id,
            "state": self._state_machine.state.name,
            "files_loaded": report.files_loaded,
            "files_skipped": report.files_skipped,
            "fallbacks": report.fallbacks,
            "keys_written": report.keys_written,
            "key_count": len(self._store),
            "error_count": len(report.errors),
            "errors": report.error_records(),
            "load_duration_ms": self._load_duration_ms,
        }

    def get_load_summary_json(self) -> str:
        """Get load summary as JSON string with stable ordering."""
        return json.dumps(self.get_load_summary(), sort_keys=True, indent=2)
