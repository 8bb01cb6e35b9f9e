"""Sync a local site from another environment.

The sync pipeline installs Composer dependencies, dumps the source
database to a file, replaces the local database with it and finally
imports configuration as the chosen environment. Every step is optional:
a failure is reported as a warning and the next step still runs, except
where a step needs an earlier one (no import after a failed drop).
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from sitekit.pipeline.exceptions import ResourceAccessError
from sitekit.pipeline.models import PipelineResult, Step, StepKind
from sitekit.pipeline.runner import Pipeline
from sitekit.workflows.conf import ConfWorkflow
from sitekit.workflows.runtime import config_section

if TYPE_CHECKING:
    from sitekit.targets.models import ExecutionContext, SiteAlias, Target
    from sitekit.workflows.runtime import Runtime

logger = logging.getLogger(__name__)

#: Dump directory relative to the local docroot.
DEFAULT_DUMP_DIR = "../database_backups"

#: Default environment to sync from.
DEFAULT_ENVIRONMENT_FROM = "remote_prod"

#: Permissions forced on an existing dump directory.
DUMP_DIR_MODE = 0o777

COMPOSER_COMMAND = "composer install --prefer-dist -v -o"


@dataclass(frozen=True, slots=True)
class SyncOptions:
    """Flags of one sync run.

    Attributes:
        dump_dir: Dump directory (relative paths are joined to the local docroot).
        skip_composer: Skip dependency installation.
        skip_config: Skip the configuration import.
        skip_db_dump: Skip the database dump and reuse an existing dump file.
        skip_db_import: Skip dropping and importing the local database.
    """

    dump_dir: str | None = None
    skip_composer: bool = False
    skip_config: bool = False
    skip_db_dump: bool = False
    skip_db_import: bool = False


@dataclass(frozen=True, slots=True)
class DumpPaths:
    """Location of the database dump for one sync.

    Examples:
        >>> paths = DumpPaths.for_target("www", "remote_prod", "/var/www/docroot", "../database_backups")
        >>> str(paths.file)
        '/var/www/database_backups/www.remote_prod.sql'
    """

    directory: Path
    file: Path

    @classmethod
    def for_target(cls, site: str, environment_from: str, docroot: str | None, dump_dir: str) -> DumpPaths:
        """Compute the dump directory and file for ``site`` synced from ``environment_from``."""
        base = Path(docroot) if docroot else Path.cwd()
        directory = Path(os.path.normpath(base / dump_dir))
        return cls(directory=directory, file=directory / f"{site}.{environment_from}.sql")


def prepare_dump_directory(directory: Path) -> bool:
    """Create the dump directory, or make an existing one writable.

    The existence check and the create/chmod that follows are not atomic;
    concurrent syncs of the same site may race here.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        ResourceAccessError: If the directory cannot be created or its
            permissions cannot be changed.
    """
    if not directory.exists():
        try:
            directory.mkdir(parents=True)
        except OSError as exc:
            raise ResourceAccessError(str(directory), f"Failure creating database dump directory ({exc})") from exc
        logger.debug("Created dump directory %s", directory)
        return True

    try:
        directory.chmod(DUMP_DIR_MODE)
    except OSError as exc:
        raise ResourceAccessError(
            str(directory), f"Failure adjusting database dump directory permissions ({exc})"
        ) from exc
    logger.debug("Verified dump directory permissions on %s", directory)
    return False


def check_dump_file(path: Path) -> None:
    """Ensure the dump file exists.

    Raises:
        ResourceAccessError: If it does not.
    """
    if not path.is_file():
        raise ResourceAccessError(str(path), "Database dump file does not exist")


def build_sync_steps(
    *,
    binary: str,
    source: SiteAlias,
    local_name: str,
    paths: DumpPaths,
    options: SyncOptions,
    project_root: str | None,
    import_config: Step | None = None,
) -> list[Step]:
    """Return the step list of a sync.

    Args:
        binary: Site tool executable used in shell pipelines.
        source: Alias the database is dumped from.
        local_name: Alias name of the local site.
        paths: Dump directory and file.
        options: Skip flags.
        project_root: Directory Composer runs in.
        import_config: Configuration step appended last.
    """
    dump_file = shlex.quote(str(paths.file))

    def _prepare(_context: ExecutionContext) -> None:
        prepare_dump_directory(paths.directory)

    def _check(_context: ExecutionContext) -> None:
        check_dump_file(paths.file)

    steps = [
        Step(
            name="composer",
            kind=StepKind.SHELL,
            command=COMPOSER_COMMAND,
            cwd=project_root,
            required=False,
            skip=options.skip_composer,
            title="Composer dependencies",
            description="Installing Composer dependencies.",
            success_message="Installed Composer dependencies.",
            failure_message="Failure installing Composer dependencies. Run as verbose to see full output.",
        ),
        Step(
            name="prepare-dump-dir",
            kind=StepKind.CALLABLE,
            func=_prepare,
            required=False,
            skip=options.skip_db_dump,
            title="Database",
            description="Preparing database dump directory.",
            success_message="Verified database dump directory.",
            failure_message="Skipping database dump. Import will use old file if one exists.",
        ),
        Step(
            name="db-dump",
            kind=StepKind.SHELL,
            command=f"{shlex.quote(binary)} {shlex.quote(source.name)} sql:dump --gzip > {dump_file}",
            required=False,
            skip=options.skip_db_dump,
            requires=("prepare-dump-dir",),
            description="Dumping database to file.",
            success_message="Dumped database to file.",
            failure_message="Error dumping database. Import will use old file if one exists.",
        ),
        Step(
            name="check-dump-file",
            kind=StepKind.CALLABLE,
            func=_check,
            required=False,
            skip=options.skip_db_import,
            failure_message="Skipping database import.",
        ),
        Step(
            name="db-drop",
            operation="sql:drop",
            options={"yes": True},
            required=False,
            skip=options.skip_db_import,
            requires=("check-dump-file",),
            description="Dropping local database.",
            success_message="Dropped local database.",
            failure_message="Failure dropping local database.",
        ),
        Step(
            name="db-import",
            kind=StepKind.SHELL,
            command=f"gunzip -c {dump_file} | {shlex.quote(binary)} {shlex.quote(local_name)} sql:cli",
            required=False,
            skip=options.skip_db_import,
            requires=("db-drop",),
            description="Importing database from file.",
            success_message="Imported database from file.",
            failure_message="Failure importing database from file.",
        ),
    ]
    if import_config is not None:
        steps.append(import_config)
    return steps


class SyncWorkflow:
    """Resolve a sync source and destination, then run the sync pipeline.

    Args:
        runtime: Shared collaborators.
    """

    def __init__(self, runtime: Runtime) -> None:
        self._runtime = runtime

    def run(
        self,
        site: str | None = None,
        environment_from: str | None = None,
        environment_as: str | None = None,
        options: SyncOptions | None = None,
        *,
        assume_yes: bool = False,
    ) -> PipelineResult:
        """Resolve the site and both environments, then run the pipeline.

        Raises:
            TargetValidationError: If nothing valid was chosen.
        """
        rt = self._runtime
        sync_config = config_section(rt.config, "sync")

        site = rt.resolver.resolve_site(site, purpose="sync")
        source = rt.resolver.resolve_environment(
            site,
            environment_from,
            purpose="import from",
            default=str(sync_config.get("environment_from") or DEFAULT_ENVIRONMENT_FROM),
        )
        destination = rt.resolver.resolve_environment(
            site,
            environment_as,
            purpose="import as",
            default=rt.default_environment,
        )
        return self.execute(source, destination, options or SyncOptions(), assume_yes=assume_yes)

    def execute(
        self,
        source: Target,
        destination: Target,
        options: SyncOptions,
        *,
        assume_yes: bool = False,
    ) -> PipelineResult:
        """Run the sync pipeline for resolved targets."""
        rt = self._runtime
        sync_config = config_section(rt.config, "sync")
        site = source.site

        local = rt.builder.local_context(rt.registry, site)
        dump_dir = options.dump_dir or str(sync_config.get("dump_dir") or DEFAULT_DUMP_DIR)
        paths = DumpPaths.for_target(site, source.environment, local.root, dump_dir)
        project_root = sync_config.get("project_root") or (str(Path(local.root).parent) if local.root else None)

        conf = ConfWorkflow(rt)

        def _import_config(_context: ExecutionContext) -> bool:
            return conf.execute("import", destination, assume_yes=True).success

        config_step = Step(
            name="config",
            kind=StepKind.CALLABLE,
            func=_import_config,
            required=False,
            skip=options.skip_config,
            title="Configuration",
            description=f"Syncing configuration for {site} as {destination.environment}.",
            success_message=f"Imported configuration for {site} as {destination.environment}.",
            failure_message="Failure importing configuration.",
        )
        steps = build_sync_steps(
            binary=rt.binary,
            source=rt.registry.get(source.alias_id),
            local_name=local.name,
            paths=paths,
            options=options,
            project_root=str(project_root) if project_root else None,
            import_config=config_step,
        )
        logger.debug("Sync %s from %s as %s, dump file %s", site, source, destination, paths.file)

        pipeline = Pipeline(
            "sync",
            steps,
            local,
            rt.step_runner,
            reporter=rt.reporter,
            prompter=rt.prompter,
            streaming=rt.streaming,
        )
        result = pipeline.run(
            f"Sync {site} from {source.environment} and import as {destination.environment}?",
            assume_yes=assume_yes,
            announce=f"Syncing {site} from {source.environment} and importing as {destination.environment}.",
        )
        rt.reporter.newline()
        return result


__all__ = [
    "COMPOSER_COMMAND",
    "DEFAULT_DUMP_DIR",
    "DEFAULT_ENVIRONMENT_FROM",
    "DUMP_DIR_MODE",
    "DumpPaths",
    "SyncOptions",
    "SyncWorkflow",
    "build_sync_steps",
    "check_dump_file",
    "prepare_dump_directory",
]
