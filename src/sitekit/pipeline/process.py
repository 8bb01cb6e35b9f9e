"""Out-of-process invocation of the site tool and shell commands.

``SubprocessRunner`` is the production :class:`~sitekit.pipeline.base.ProcessRunner`.
Site operations run as::

    <binary> <alias> <operation> <args...> <--options...>

with ``os.environ`` overlaid by the context's ``env_vars``. In streaming mode
both streams are forwarded line by line to the console as they are produced,
each drained on a helper thread, and a timeout or interrupt kills the
whole process session; in buffered mode both streams are captured and
returned to the caller.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from collections.abc import Mapping, Sequence
from typing import IO, TYPE_CHECKING, Any

from rich.console import Console

from sitekit.pipeline.models import ProcessOutcome
from sitekit.pipeline.validators import validate_env

if TYPE_CHECKING:
    from sitekit.targets.models import ExecutionContext

logger = logging.getLogger(__name__)

#: Default site tool binary.
DEFAULT_SITE_TOOL = "drush"

#: Return code used when a command exceeds its timeout.
TIMEOUT_RETURN_CODE = 124

#: Return code used when the binary cannot be started.
NOT_FOUND_RETURN_CODE = 127


def build_option_flags(options: Mapping[str, Any] | None) -> list[str]:
    """Render an option mapping as command-line flags.

    ``True`` becomes a bare ``--key`` flag, ``False`` and ``None`` are
    dropped and anything else becomes ``--key=value``. Keys already
    starting with ``-`` are passed through verbatim (``-y``).

    Examples:
        >>> build_option_flags({"yes": True, "choice": "full", "debug": False, "-y": True})
        ['--yes', '--choice=full', '-y']
    """
    flags: list[str] = []
    for key, value in (options or {}).items():
        if value is None or value is False:
            continue
        flag = key if key.startswith("-") else f"--{key}"
        flags.append(flag if value is True else f"{flag}={value}")
    return flags


class SubprocessRunner:
    """Run site-tool operations and shell commands with ``subprocess``.

    Args:
        binary: Site tool executable.
        console: Console that receives streamed output.
        timeout: Per-invocation timeout in seconds (None for no limit).

    Examples:
        >>> from sitekit.targets.models import ExecutionContext
        >>> runner = SubprocessRunner("drush")
        >>> ctx = ExecutionContext(name="@www.local", options={"uri": "https://www.ddev.site"})
        >>> runner.build_command(ctx, "config:import", (), {"yes": True})
        ['drush', '@www.local', 'config:import', '--yes', '--uri=https://www.ddev.site']
    """

    def __init__(
        self,
        binary: str = DEFAULT_SITE_TOOL,
        *,
        console: Console | None = None,
        timeout: float | None = None,
    ) -> None:
        self._binary = binary
        self._console = console or Console()
        self._timeout = timeout

    @property
    def binary(self) -> str:
        """Return the site tool executable."""
        return self._binary

    def build_command(
        self,
        context: ExecutionContext,
        operation: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """Return the argv for ``operation`` under ``context``."""
        merged = dict(options or {})
        uri = context.options.get("uri") or context.uri
        if uri and "uri" not in merged:
            merged["uri"] = uri
        return [self._binary, context.name, operation, *args, *build_option_flags(merged)]

    def invoke(
        self,
        context: ExecutionContext,
        operation: str,
        args: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        *,
        streaming: bool = False,
    ) -> ProcessOutcome:
        """Run a site-tool operation against ``context``."""
        argv = self.build_command(context, operation, args, options)
        env = self._environment(context.env_vars)
        logger.debug("Invoking %s", " ".join(argv))
        return self._run(argv, env=env, cwd=None, shell=False, streaming=streaming)

    def shell(
        self,
        command: str,
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        streaming: bool = False,
    ) -> ProcessOutcome:
        """Run a shell command (pipes and redirections allowed)."""
        logger.debug("Running shell command: %s", command)
        workdir = os.path.expandvars(cwd) if cwd else None
        return self._run(command, env=self._environment(env), cwd=workdir, shell=True, streaming=streaming)

    def _environment(self, overlay: Mapping[str, str] | None) -> dict[str, str]:
        validate_env(overlay or {})
        return {**os.environ, **(overlay or {})}

    def _run(
        self,
        command: str | list[str],
        *,
        env: Mapping[str, str],
        cwd: str | None,
        shell: bool,
        streaming: bool,
    ) -> ProcessOutcome:
        start = time.monotonic()
        try:
            if streaming:
                outcome = self._run_streaming(command, env=env, cwd=cwd, shell=shell)
            else:
                proc = subprocess.run(  # noqa: S603
                    command,
                    shell=shell,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self._timeout,
                    env=dict(env),
                    cwd=cwd,
                )
                outcome = ProcessOutcome(proc.returncode, proc.stdout, proc.stderr)
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", self._timeout, command)
            return ProcessOutcome(TIMEOUT_RETURN_CODE, "", f"Timed out after {self._timeout}s")
        except OSError as exc:
            logger.debug("Command could not be started: %s", exc)
            return ProcessOutcome(NOT_FOUND_RETURN_CODE, "", str(exc))

        logger.debug("Command exited with %d in %.3fs", outcome.return_code, time.monotonic() - start)
        return outcome

    def _run_streaming(
        self,
        command: str | list[str],
        *,
        env: Mapping[str, str],
        cwd: str | None,
        shell: bool,
    ) -> ProcessOutcome:
        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        with subprocess.Popen(  # noqa: S603
            command,
            shell=shell,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=dict(env),
            cwd=cwd,
            start_new_session=os.name == "posix",
        ) as proc:
            drains = [
                threading.Thread(target=_drain, args=(proc.stdout, stdout_lines, self._console, None), daemon=True),
                threading.Thread(target=_drain, args=(proc.stderr, stderr_lines, self._console, "red"), daemon=True),
            ]
            for drain in drains:
                drain.start()
            try:
                return_code = proc.wait(timeout=self._timeout)
            except (subprocess.TimeoutExpired, KeyboardInterrupt):
                _kill(proc)
                raise
            finally:
                for drain in drains:
                    drain.join()

        return ProcessOutcome(return_code, "".join(stdout_lines), "".join(stderr_lines))


def _kill(proc: subprocess.Popen[str]) -> None:
    # The whole session goes, so shell children holding the pipes die too.
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        proc.kill()
    proc.wait()


def _drain(stream: IO[str] | None, sink: list[str], console: Console, style: str | None) -> None:
    if stream is None:
        return
    for line in stream:
        sink.append(line)
        console.print(line.rstrip("\n"), markup=False, highlight=False, style=style)


__all__ = [
    "DEFAULT_SITE_TOOL",
    "NOT_FOUND_RETURN_CODE",
    "TIMEOUT_RETURN_CODE",
    "SubprocessRunner",
    "build_option_flags",
]
