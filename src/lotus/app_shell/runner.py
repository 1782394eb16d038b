"""
Default test run for a target project directory.

Resolves the project's directories and configuration, wires the Docker
runtime and the packaged templates into a RunCoordinator, and runs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lotus.adapters.docker_runtime import DockerRuntime
from lotus.adapters.fs import collect_patterns, collect_rules, collect_scripts, collect_tests
from lotus.adapters.templates import PackagedTemplateStore
from lotus.app_shell.config import Settings, image_tag, project_cache_dir
from lotus.components.archive import ArchiveBuilder, BuildContext
from lotus.components.containers import ContainerManager, ContainerRuntimePort, PortLayout
from lotus.components.runner import RunCoordinator, RunOutput, RunPlan
from lotus.core.errors import FileAccessError
from lotus.rules import RULES_FILE, RunnerRules, load_rules

logger = logging.getLogger(__name__)

RULES_DIR = "rules"
TESTS_DIR = "tests"
SCRIPTS_DIR = "scripts"
PATTERNS_DIR = "patterns"


@dataclass(frozen=True)
class DefaultArguments:
    """Options of one run; directory options are relative to the target."""

    target: Path | None = None
    no_delete_container: bool = False
    rules_dir: str = RULES_DIR
    tests_dir: str = TESTS_DIR
    scripts_dir: str = SCRIPTS_DIR
    patterns_dir: str = PATTERNS_DIR
    config: Path | None = None

    def resolved_target(self) -> Path:
        return self.target if self.target is not None else Path.cwd()


def load_run_rules(args: DefaultArguments, target: Path) -> RunnerRules:
    if args.config is not None:
        return load_rules(args.config, required=True)
    return load_rules(target / RULES_FILE)


def build_plan(args: DefaultArguments, rules: RunnerRules, settings: Settings) -> RunPlan:
    """
    Collect the project's files and describe the run.

    Raises:
        ConfigurationError: no rules or no test cases were found.
        FileAccessError: a test case is incomplete or the cache cannot be created.
    """
    target = args.resolved_target()

    rule_files = collect_rules(target / args.rules_dir)
    test_cases = collect_tests(target / args.tests_dir)
    scripts = collect_scripts(target / args.scripts_dir)
    patterns = collect_patterns(target / args.patterns_dir)

    cache_dir = project_cache_dir(settings, target)
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileAccessError("Creating the cache directory", cache_dir) from e

    return RunPlan(
        cache_dir=cache_dir,
        image_tag=image_tag(rules.image_namespace, target),
        rules=rule_files,
        test_cases=test_cases,
        scripts=scripts,
        patterns=patterns,
        context=BuildContext(
            input_port=rules.ports.input,
            output_port=rules.ports.output,
            api_port=rules.ports.api,
            output_host=rules.output_host,
        ),
        engine_host=rules.engine_host,
        collector_host=rules.collector_host,
        health_retries=rules.health.retries,
        health_delay=rules.health.delay_seconds,
        channel_capacity=rules.channel_capacity,
        event_timeout=rules.event_timeout_seconds,
        auto_remove=not args.no_delete_container,
    )


async def default_runner(
    args: DefaultArguments,
    runtime: ContainerRuntimePort | None = None,
    settings: Settings | None = None,
) -> RunOutput:
    """
    Run every test case of the target project in a fresh engine container.

    Collection and configuration failures raise; failures during the run
    itself are reported in the returned RunOutput.
    """
    target = args.resolved_target()
    rules = load_run_rules(args, target)
    plan = build_plan(args, rules, settings or Settings.from_env())
    logger.info("Running %d test case(s) for %s", len(plan.test_cases), target)

    manager = ContainerManager(
        runtime if runtime is not None else DockerRuntime.from_env(),
        PortLayout(input_port=rules.ports.input, api_port=rules.ports.api),
    )
    coordinator = RunCoordinator(ArchiveBuilder(PackagedTemplateStore()), manager)
    return await coordinator.run(plan)
