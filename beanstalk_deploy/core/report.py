"""Formatting of snapshots and reports for logs and terminal output."""

from typing import Any

from beanstalk_deploy.models.deployment import DeploymentReport, EnvironmentResult
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent


def snapshot_fields(
    snapshot: EnvironmentSnapshot | None, event: RecentEvent | None = None
) -> dict[str, Any]:
    """Key/value log context for the last thing seen of an environment."""
    fields: dict[str, Any] = {}
    if snapshot is not None:
        fields.update(
            status=snapshot.status,
            health=snapshot.health,
            version=snapshot.version_label,
        )
    if event is not None:
        fields["last_event"] = event.message
    return fields


def _render_result(result: EnvironmentResult) -> str:
    line = f"  {result.environment}: {result.outcome.value}"
    if result.snapshot is not None:
        line += (
            f" (status={result.snapshot.status or '-'}"
            f" health={result.snapshot.health or '-'}"
            f" version={result.snapshot.version_label or '-'})"
        )
    line += f" after {result.polls} poll(s), {result.elapsed_seconds:.0f}s"
    if result.readiness_polls:
        line += f" (+{result.readiness_polls} readiness poll(s))"
    if result.error:
        line += f"\n    error: {result.error}"
    if result.event is not None and result.event.message:
        line += f"\n    last event: {result.event.message}"
    return line


def render_summary(report: DeploymentReport) -> str:
    """Render a human-readable summary of a deployment run."""
    lines = [
        f"{report.application} @ {report.version_label}: {report.outcome.value}",
    ]
    if report.version_created:
        lines.append("  version registered")
    if report.version_error:
        lines.append(f"  version registration failed: {report.version_error}")

    lines.extend(_render_result(result) for result in report.environments)

    if report.skipped_environments:
        lines.append(f"  skipped: {', '.join(report.skipped_environments)}")

    return "\n".join(lines)
