"""PostgreSQL dump functionality.

Streams ``pg_dump`` through an external compressor into a timestamped file:
7-zip when it is installed, gzip otherwise.
"""

from __future__ import annotations

import subprocess
import tempfile
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, TYPE_CHECKING

from chartops.cli.deployment.errors import ExternalCommandError
from chartops.infra.postgres.connection import database_name, with_database

if TYPE_CHECKING:
    from chartops.cli.deployment.shell_commands.runner import CommandRunner
    from chartops.cli.shared.console import CLIConsole

REDACTED = "<database-url>"


@dataclass(frozen=True)
class Compressor:
    """How to compress a dump read from stdin."""

    extension: str
    command: list[str]
    writes_file: bool


def select_compressor(runner: CommandRunner, base_path: Path, entry_name: str) -> Compressor:
    """Prefer 7-zip (``7z``/``7za``) and fall back to gzip.

    ``base_path`` is the dump path without its extension.
    """
    seven_zip = runner.which("7z", "7za")
    if seven_zip:
        archive = base_path.with_name(f"{base_path.name}.7z")
        return Compressor(
            extension="7z",
            command=[seven_zip, "a", f"-si{entry_name}", str(archive)],
            writes_file=True,
        )
    return Compressor(extension="gz", command=[runner.require("gzip"), "-c"], writes_file=False)


class PostgresDump:
    """Creates compressed PostgreSQL dumps."""

    def __init__(self, runner: CommandRunner, console: CLIConsole, output_dir: Path) -> None:
        self.runner = runner
        self.console = console
        self.output_dir = output_dir

    def base_path(self, database: str, now: datetime) -> Path:
        """Dump path without extension: ``<dir>/<database>-<YYYYMMDD-HHMMSS>``."""
        return self.output_dir / f"{database}-{now.strftime('%Y%m%d-%H%M%S')}"

    def create_dump(
        self,
        database_url: str,
        *,
        database: str | None = None,
        now: datetime | None = None,
    ) -> Path:
        """Dump a database to ``<database>-<YYYYMMDD-HHMMSS>.<7z|gz>``.

        Args:
            database_url: Connection URI (through the tunnel)
            database: Database to dump (defaults to the URI's database)
            now: Timestamp for the file name (defaults to now)

        Returns:
            Path of the compressed dump

        Raises:
            MissingDependencyError: If pg_dump or gzip is not installed
            ExternalCommandError: If pg_dump or the compressor fails
        """
        if database:
            database_url = with_database(database_url, database)
        database = database_name(database_url)
        now = now or datetime.now()
        pg_dump = self.runner.require("pg_dump")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        base = self.base_path(database, now)
        compressor = select_compressor(self.runner, base, f"{database}.sql")
        path = base.with_name(f"{base.name}.{compressor.extension}")

        dump_cmd = [pg_dump, "--dbname", database_url]
        # The URL carries credentials
        self.runner.echo_command([pg_dump, "--dbname", REDACTED])
        self.runner.echo_command(compressor.command)

        self.console.info(f"Dumping {database} to {path}")
        try:
            self._pipe(dump_cmd, compressor, path)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        self.console.ok(f"Dump written: {path}")
        return path

    def _pipe(self, dump_cmd: list[str], compressor: Compressor, path: Path) -> None:
        sink = nullcontext(None) if compressor.writes_file else open(path, "wb")
        # pg_dump stderr is only read once the pipeline is done, so it goes
        # to a file rather than a pipe that could fill up
        with sink as out, tempfile.TemporaryFile() as dump_log:
            target: IO[bytes] | int = out if out is not None else subprocess.DEVNULL
            dump = subprocess.Popen(dump_cmd, stdout=subprocess.PIPE, stderr=dump_log)
            compress = subprocess.Popen(
                compressor.command,
                stdin=dump.stdout,
                stdout=target,
                stderr=subprocess.PIPE,
            )
            # Let pg_dump receive SIGPIPE if the compressor exits early
            if dump.stdout:
                dump.stdout.close()

            _, compress_err = compress.communicate()
            dump.wait()
            dump_log.seek(0)
            dump_err = dump_log.read()

        if dump.returncode != 0:
            raise ExternalCommandError(
                [dump_cmd[0]], dump.returncode, dump_err.decode(errors="replace")
            )
        if compress.returncode != 0:
            raise ExternalCommandError(
                compressor.command, compress.returncode, compress_err.decode(errors="replace")
            )
