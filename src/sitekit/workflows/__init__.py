"""Operator workflows: configuration sync, environment sync and health checks."""

from sitekit.workflows.check import CheckOptions, HealthReport, UrlCheckWorkflow
from sitekit.workflows.conf import OPERATIONS, ConfWorkflow, build_conf_steps
from sitekit.workflows.runtime import Runtime
from sitekit.workflows.sync import DumpPaths, SyncOptions, SyncWorkflow, build_sync_steps, prepare_dump_directory

__all__ = [
    "OPERATIONS",
    "CheckOptions",
    "ConfWorkflow",
    "DumpPaths",
    "HealthReport",
    "Runtime",
    "SyncOptions",
    "SyncWorkflow",
    "UrlCheckWorkflow",
    "build_conf_steps",
    "build_sync_steps",
    "prepare_dump_directory",
]
