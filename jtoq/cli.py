"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from jtoq import __version__
from jtoq.config_mapper import validate
from jtoq.core.config import get_app_config, init_app_config
from jtoq.core.exceptions import JsonParseError, ResultParseError, SubmissionError
from jtoq.json_codec import JsonCodec
from jtoq.junit_results import JUnitResultParser, collect_result_files, to_automation_logs
from jtoq.pipeline_models import PipelineConfiguration
from jtoq.qtest_submitter import QTestSubmitter

console = Console()

app = typer.Typer(help="JTOQ - JUnit to qTest")

logger = logging.getLogger("jtoq")

CONFIG_OPTION_HELP = "Pipeline configuration JSON file (JTOQ_* environment variables when omitted)"


def configure_app(debug: bool = False):
    """
    Configure the application with the specified settings.

    Args:
    ----
        debug: Whether to enable debug mode

    """
    config = init_app_config(debug=debug, app_version=__version__)
    config.configure_logging()
    return config


def version_callback(value: bool):
    if value:
        console.print(f"JTOQ version: {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode with verbose logging"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the application version and exit",
        callback=version_callback,
        is_eager=True,
    ),
):
    """
    JTOQ - Submit JUnit test results to qTest.

    Use --debug to enable verbose logging.
    """
    configure_app(debug=debug)


def load_pipeline_configuration(config_path: Path | None, codec: JsonCodec) -> PipelineConfiguration:
    """
    Load a pipeline configuration from a JSON file, or from the environment.

    Raises:
        JsonParseError: If the file is empty, not JSON, or not a configuration
        OSError: If the file cannot be read
    """
    if config_path is None:
        return PipelineConfiguration.from_env()

    configuration = codec.parse_json(config_path.read_text(encoding="utf-8"), PipelineConfiguration)
    if configuration is None:
        raise JsonParseError(f"Configuration file {config_path} is empty")
    return configuration


def _load_or_exit(config_path: Path | None, codec: JsonCodec) -> PipelineConfiguration:
    try:
        return load_pipeline_configuration(config_path, codec)
    except (OSError, JsonParseError, ValueError) as e:
        console.print(f"Error: cannot load configuration: {e}", style="red")
        raise typer.Exit(code=1)


def _configuration_table(configuration: PipelineConfiguration) -> Table:
    table = Table(title="Pipeline Configuration")
    table.add_column("Field")
    table.add_column("Value")

    for name in PipelineConfiguration.model_fields:
        value = getattr(configuration, name)
        if name == "api_key" and value:
            value = f"{value[:4]}****"
        table.add_row(name, str(value))
    return table


@app.command("validate")
def validate_configuration(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """
    Check that a pipeline configuration has everything a submission needs.
    """
    codec = JsonCodec()
    configuration = _load_or_exit(config_path, codec)
    console.print(_configuration_table(configuration))

    if validate(configuration):
        console.print("✅ Configuration is valid", style="green")
    else:
        console.print(
            "❌ Configuration is invalid: qTest URL, API key and container type are required, "
            "project and container IDs must be positive",
            style="red",
        )
        raise typer.Exit(code=1)


@app.command("show-request")
def show_request(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """
    Print the JUnit submit request built from a configuration.
    """
    codec = JsonCodec(indent=2)
    configuration = _load_or_exit(config_path, codec)
    if not validate(configuration):
        logger.warning("Configuration is invalid; the request below is incomplete")
    typer.echo(codec.serialize(configuration.create_junit_submit_request()))


@app.command("show-setting")
def show_setting(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    server_url: str = typer.Option("", "--server-url", help="Jenkins server URL"),
    project_name: str = typer.Option("", "--project-name", help="Jenkins project name"),
    old: bool = typer.Option(False, "--old", help="Use the setting shape of older qTest versions"),
):
    """
    Print the qTest setting persisted for a configuration.
    """
    codec = JsonCodec(indent=2)
    configuration = _load_or_exit(config_path, codec)
    setting = configuration.to_setting(old, server_url, project_name)
    typer.echo(codec.serialize(setting, exclude_none=True))


def _parse_workspace(configuration: PipelineConfiguration, workspace: Path, codec: JsonCodec):
    files = collect_result_files(workspace, configuration.parse_test_results_pattern)
    if not files:
        console.print(
            f"Error: no test result files match '{configuration.parse_test_results_pattern}' "
            f"in {workspace}",
            style="red",
        )
        raise typer.Exit(code=1)

    try:
        return JUnitResultParser(codec).parse_files(files)
    except ResultParseError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(code=1)


@app.command("parse-results")
def parse_results(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    workspace: Path = typer.Option(Path("."), "--workspace", "-w", help="Build workspace directory"),
):
    """
    List the JUnit suites found with the configured results pattern.
    """
    codec = JsonCodec()
    configuration = _load_or_exit(config_path, codec)
    suites = _parse_workspace(configuration, workspace, codec)

    table = Table(title="JUnit Results")
    table.add_column("Suite")
    table.add_column("Tests")
    table.add_column("Failures")
    table.add_column("Skipped")
    for suite in suites:
        table.add_row(suite.name, str(len(suite.cases)), str(suite.failures), str(suite.skipped))
    console.print(table)

    logs = to_automation_logs(suites, configuration.create_test_case_for_each_junit_test_class)
    console.print(f"{len(logs)} test log(s) would be submitted")


@app.command("submit")
def submit(
    config_path: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    workspace: Path = typer.Option(Path("."), "--workspace", "-w", help="Build workspace directory"),
    server_url: str | None = typer.Option(None, "--server-url", help="Jenkins server URL"),
    project_name: str | None = typer.Option(None, "--project-name", help="Jenkins project name"),
    build_number: str | None = typer.Option(None, "--build-number", help="Build number"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the payload instead of submitting"),
):
    """
    Validate the configuration, parse JUnit results and submit them to qTest.
    """
    codec = JsonCodec()
    configuration = _load_or_exit(config_path, codec)
    if not validate(configuration):
        console.print("Error: configuration is invalid, run 'jtoq validate' for details", style="red")
        raise typer.Exit(code=1)

    request = configuration.create_junit_submit_request()
    request.jenkins_server_url = server_url
    request.jenkins_project_name = project_name
    request.build_number = build_number
    request.build_path = str(workspace)

    suites = _parse_workspace(configuration, workspace, codec)
    logs = to_automation_logs(suites, configuration.create_test_case_for_each_junit_test_class)

    submitter = QTestSubmitter.from_config(get_app_config().submitter, codec)
    if dry_run:
        typer.echo(JsonCodec(indent=2).serialize(submitter.build_payload(request, logs)))
        return

    try:
        result = submitter.submit(request, logs)
    except SubmissionError as e:
        console.print(f"Error: submission failed: {e}", style="red")
        raise typer.Exit(code=1)

    console.print(
        f"Submitted {result.test_log_count} test log(s) to qTest project {request.project_id}: "
        f"job {result.job_id} {result.state}",
        style="green",
    )


if __name__ == "__main__":
    app()
