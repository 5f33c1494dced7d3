"""Run every registered plugin against the serialized root document."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..errors import (
    PLUGIN_EXECUTION_ERROR,
    PLUGIN_NOT_FOUND,
    PluginErrors,
    PluginFailure,
)
from ..logging import get_logger
from .payload import patch_output_base
from .registry import PluginSpec

Runner = Callable[..., int]
Resolver = Callable[[str], Optional[str]]


@dataclass
class PluginOutcome:
    """Result of one plugin invocation."""

    plugin: PluginSpec
    path: Optional[str] = None
    returncode: Optional[int] = None
    failure: Optional[PluginFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class PipelineReport:
    """Outcomes of a pipeline run, one per plugin in registration order."""

    outcomes: List[PluginOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[PluginFailure]:
        return [outcome.failure for outcome in self.outcomes if outcome.failure is not None]

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise one PluginErrors carrying every failure, if any plugin failed."""
        failures = self.failures
        if failures:
            raise PluginErrors(failures)


class PluginPipeline:
    """Feeds the document to each plugin in turn over its stdin.

    Plugins run sequentially. A plugin that cannot be found, exits non-zero
    or breaks while reading its input is recorded and the next plugin still
    runs; nothing is retried.
    """

    def __init__(
        self,
        plugins: Sequence[PluginSpec],
        *,
        timeout: Optional[float] = None,
        runner: Optional[Runner] = None,
        resolver: Optional[Resolver] = None,
    ) -> None:
        self._plugins = list(plugins)
        self._timeout = timeout
        self._runner = runner or self._default_runner
        self._resolver = resolver or shutil.which
        self.logger = get_logger("plugins")

    def run(self, payload: bytes) -> PipelineReport:
        # all payloads are patched before the first plugin starts
        patched = [(plugin, patch_output_base(payload, plugin.output_dir)) for plugin in self._plugins]

        report = PipelineReport()
        for plugin, data in patched:
            outcome = self._invoke(plugin, data)
            if outcome.ok:
                self.logger.info("Plugin %s finished (output: %s)", plugin.program, plugin.output_dir)
            else:
                self.logger.error("%s", outcome.failure)
            report.outcomes.append(outcome)
        return report

    def _invoke(self, plugin: PluginSpec, data: bytes) -> PluginOutcome:
        path = self._resolver(plugin.program)
        if path is None:
            return PluginOutcome(
                plugin=plugin,
                failure=PluginFailure(
                    kind=PLUGIN_NOT_FOUND,
                    command=plugin.program,
                    path=plugin.program,
                    message=f'exec: "{plugin.program}": executable file not found in $PATH',
                ),
            )

        self.logger.debug("Running plugin %s (%s) with args %s", plugin.program, path, plugin.args)
        try:
            returncode = self._runner(plugin.argv, executable=path, data=data, timeout=self._timeout)
        except subprocess.TimeoutExpired:
            return self._execution_failure(plugin, path, f"timed out after {self._timeout}s")
        except OSError as exc:
            return self._execution_failure(plugin, path, str(exc))

        if returncode != 0:
            outcome = self._execution_failure(plugin, path, f"exit status {returncode}")
            outcome.returncode = returncode
            return outcome
        return PluginOutcome(plugin=plugin, path=path, returncode=returncode)

    @staticmethod
    def _execution_failure(plugin: PluginSpec, path: str, message: str) -> PluginOutcome:
        return PluginOutcome(
            plugin=plugin,
            path=path,
            failure=PluginFailure(
                kind=PLUGIN_EXECUTION_ERROR,
                command=plugin.program,
                path=path,
                message=message,
            ),
        )

    @staticmethod
    def _default_runner(
        argv: Sequence[str],
        *,
        executable: str,
        data: bytes,
        timeout: Optional[float] = None,
    ) -> int:
        # stdout and stderr are inherited from toast
        completed = subprocess.run(
            list(argv),
            executable=executable,
            input=data,
            timeout=timeout,
            check=False,
        )
        return completed.returncode


def run_plugins(
    payload: bytes, plugins: Sequence[PluginSpec], *, timeout: Optional[float] = None
) -> PipelineReport:
    """Run ``plugins`` against ``payload`` and raise PluginErrors if any failed."""
    report = PluginPipeline(plugins, timeout=timeout).run(payload)
    report.raise_for_failures()
    return report


__all__ = ["PipelineReport", "PluginOutcome", "PluginPipeline", "run_plugins"]
