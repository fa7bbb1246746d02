"""Command-line entry point.

Commands:
    serve       Run the webhook engine (same as ``python -m selfheal``).
    send-alert  POST a synthetic single-alert batch to a running engine.
"""

from __future__ import annotations

import asyncio
import json
import sys

import click
import httpx

from selfheal import __version__


@click.group()
@click.version_option(__version__, prog_name="selfheal")
def cli() -> None:
    """Self-healing webhook engine for Alertmanager and Kubernetes."""


@cli.command()
def serve() -> None:
    """Run the webhook server. Configuration comes from SELFHEAL_* variables."""
    from selfheal.app import main

    asyncio.run(main())


def build_alert_payload(
    action: str,
    alertname: str,
    app: str | None,
    pod: str | None,
    namespace: str | None,
    resolved: bool = False,
) -> dict[str, object]:
    """Build an Alertmanager-shaped body carrying one alert."""
    labels = {"alertname": alertname, "recovery_action": action}
    if app:
        labels["app"] = app
    if pod:
        labels["pod"] = pod
    if namespace:
        labels["namespace"] = namespace
    return {
        "version": "4",
        "status": "resolved" if resolved else "firing",
        "alerts": [
            {
                "labels": labels,
                "annotations": {"summary": f"synthetic {alertname} sent by selfheal send-alert"},
                "status": "resolved" if resolved else "firing",
            }
        ],
    }


@cli.command("send-alert")
@click.option("--url", default="http://localhost:8080/webhook", show_default=True, help="Webhook endpoint.")
@click.option(
    "--action",
    default="restart",
    show_default=True,
    help="recovery_action label (restart, redeploy, scale, or anything else to test rejection).",
)
@click.option("--alertname", default="ManualTest", show_default=True)
@click.option("--app", "app_name", default=None, help="app label.")
@click.option("--pod", default=None, help="pod label.")
@click.option("--namespace", default=None, help="namespace label.")
@click.option("--resolved", is_flag=True, help="Send the alert with status=resolved.")
@click.option("--timeout", default=10.0, show_default=True, help="HTTP timeout in seconds.")
def send_alert(
    url: str,
    action: str,
    alertname: str,
    app_name: str | None,
    pod: str | None,
    namespace: str | None,
    resolved: bool,
    timeout: float,
) -> None:
    """Send one synthetic alert to a running engine and print the reply."""
    payload = build_alert_payload(action, alertname, app_name, pod, namespace, resolved)
    click.echo(json.dumps(payload, indent=2), err=True)
    try:
        response = httpx.post(url, json=payload, timeout=timeout)
    except httpx.HTTPError as exc:
        click.echo(f"request failed: {exc}", err=True)
        sys.exit(2)

    click.echo(f"{response.status_code} {response.text}")
    if not response.is_success:
        sys.exit(1)
