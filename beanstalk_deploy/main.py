"""Command-line entry point.

Resolves settings from flags and ``PLUGIN_*`` environment variables, picks a
credential provider, and runs the orchestrator once.
"""

import asyncio
from typing import Annotated, Optional

import typer
from botocore.exceptions import BotoCoreError

from beanstalk_deploy import __version__
from beanstalk_deploy.clients.base import ControlPlaneClient
from beanstalk_deploy.clients.beanstalk import BeanstalkClient
from beanstalk_deploy.clients.credentials import select_credential_provider
from beanstalk_deploy.config import load_settings
from beanstalk_deploy.core.exceptions import ConfigError, DeployError, UpstreamError
from beanstalk_deploy.core.orchestrator import DeploymentOrchestrator
from beanstalk_deploy.core.report import render_summary
from beanstalk_deploy.models.deployment import DeploymentRequest
from beanstalk_deploy.utils.logging import configure_logging, get_logger

EXIT_FAILED = 1
EXIT_CONFIG = 2

app = typer.Typer(add_completion=False, help="Elastic Beanstalk deployment plugin.")
logger = get_logger(__name__)


def build_client(request: DeploymentRequest) -> ControlPlaneClient:
    """Resolve credentials and construct the control-plane client.

    Raises:
        UpstreamError: If no credentials can be found or the client cannot be built.
    """
    provider = select_credential_provider(request.credentials)
    logger.info(
        "deploy.authenticating",
        region=request.region,
        application=request.application,
        environments=list(request.environments),
        bucket=request.artifact.bucket if request.artifact else None,
        bucket_key=request.artifact.key if request.artifact else None,
        version_label=request.version_label,
        description=request.description,
        environment_update=request.environment_update,
        auto_create=request.auto_create,
        timeout_seconds=request.timeout.total_seconds(),
        credentials=provider.name,
    )
    credentials = provider.resolve(request.region)
    logger.debug("deploy.authenticated", access_key_id=credentials.access_key_id)

    try:
        return BeanstalkClient(provider, request.region)
    except BotoCoreError as e:
        raise UpstreamError("CreateClient", str(e)) from e


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"beanstalk-deploy {__version__}")
        raise typer.Exit()


@app.command()
def deploy(
    access_key: Annotated[Optional[str], typer.Option(help="AWS access key.")] = None,
    secret_key: Annotated[Optional[str], typer.Option(help="AWS secret key.")] = None,
    region: Annotated[Optional[str], typer.Option(help="AWS region.")] = None,
    bucket: Annotated[Optional[str], typer.Option(help="S3 bucket holding the source bundle.")] = None,
    bucket_key: Annotated[Optional[str], typer.Option(help="S3 key of the source bundle.")] = None,
    application: Annotated[Optional[str], typer.Option(help="Beanstalk application name.")] = None,
    environment: Annotated[
        Optional[list[str]],
        typer.Option("--environment", "-e", help="Environment to update; repeat for several."),
    ] = None,
    version_label: Annotated[Optional[str], typer.Option(help="Version label to deploy.")] = None,
    description: Annotated[Optional[str], typer.Option(help="Version description.")] = None,
    auto_create: Annotated[
        Optional[bool], typer.Option("--auto-create/--no-auto-create", help="Create the application if missing.")
    ] = None,
    process: Annotated[
        Optional[bool], typer.Option("--process/--no-process", help="Preprocess and validate the bundle.")
    ] = None,
    environment_update: Annotated[
        Optional[bool],
        typer.Option("--environment-update/--no-environment-update", help="Update the environments."),
    ] = None,
    wait_for_ready: Annotated[
        Optional[bool],
        typer.Option("--wait-for-ready/--no-wait-for-ready", help="Wait for Ready before updating."),
    ] = None,
    timeout: Annotated[Optional[int], typer.Option(help="Deploy timeout in minutes.")] = None,
    poll_interval: Annotated[Optional[float], typer.Option(help="Seconds between polls.")] = None,
    log_level: Annotated[Optional[str], typer.Option(help="DEBUG, INFO, WARNING or ERROR.")] = None,
    log_format: Annotated[Optional[str], typer.Option(help="console or json.")] = None,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
) -> None:
    """Register a version and roll environments to it."""
    try:
        settings = load_settings(
            access_key=access_key,
            secret_key=secret_key,
            region=region,
            bucket=bucket,
            bucket_key=bucket_key,
            application=application,
            environments=environment or None,
            version_label=version_label,
            description=description,
            auto_create=auto_create,
            process=process,
            environment_update=environment_update,
            wait_for_ready=wait_for_ready,
            timeout=timeout,
            poll_interval=poll_interval,
            log_level=log_level,
            log_format=log_format,
        )
        configure_logging(settings.log_level, settings.log_format)
        request = settings.to_request()
    except ConfigError as e:
        configure_logging()
        logger.error("deploy.invalid_configuration", error=e.message, **e.details)
        raise typer.Exit(code=EXIT_CONFIG)

    try:
        client = build_client(request)
        report = asyncio.run(DeploymentOrchestrator(client).run(request))
    except DeployError as e:
        logger.error("deploy.failed", error=e.message, **e.details)
        raise typer.Exit(code=EXIT_FAILED)

    typer.echo(render_summary(report))
    if not report.succeeded:
        raise typer.Exit(code=EXIT_FAILED)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
