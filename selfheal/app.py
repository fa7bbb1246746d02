"""Application bootstrap for selfheal.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → K8s client → engine → REST → counters logger

The Kubernetes client is mandatory: without usable credentials the process
exits non-zero instead of accepting alerts it cannot act on.

Shutdown is graceful: components are stopped in reverse startup order and
each stop error is caught and logged independently.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from selfheal.config import load_config, parse_duration
from selfheal.models.config import SelfHealConfig
from selfheal.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from selfheal.cluster.base import ClusterClient
    from selfheal.engine import AlertProcessor, CooldownGuard, RecoveryCounters

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class SelfHealApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already stopped)
    is safe.
    """

    def __init__(self) -> None:
        self.config: SelfHealConfig | None = None

        self._cluster: ClusterClient | None = None
        self._cooldown: CooldownGuard | None = None
        self._counters: RecoveryCounters | None = None
        self._processor: AlertProcessor | None = None
        self._rest_server: object | None = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        try:
            self.config = load_config()
        except ValueError as exc:
            raise _ComponentError("config", exc) from exc

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("selfheal starting", version=_selfheal_version())

        # --- 3. Kubernetes client ----------------------------------------
        await self._start_cluster_client()

        # --- 4. Recovery engine ------------------------------------------
        self._start_engine()

        # --- 5. REST API -------------------------------------------------
        await self._start_rest()

        # --- 6. Periodic counters log line --------------------------------
        self._start_counters_logger()

        self._running = True
        self._log.info("selfheal started", port=self.config.api.port)

    # ------------------------------------------------------------------
    # Component startup helpers
    # ------------------------------------------------------------------

    async def _start_cluster_client(self) -> None:
        """Build the kubernetes-asyncio client from in-cluster config or kubeconfig."""
        assert self._log is not None
        self._log.debug("starting k8s client")
        try:
            from selfheal.cluster.kubernetes import KubernetesClusterClient

            self._cluster = await KubernetesClusterClient.create()
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    def _start_engine(self) -> None:
        """Construct the shared cooldown/counter state and the processor."""
        assert self._log is not None
        assert self.config is not None
        assert self._cluster is not None
        from selfheal.engine import AlertProcessor, CooldownGuard, RecoveryCounters, RecoveryExecutor

        engine_cfg = self.config.engine
        self._cooldown = CooldownGuard(window_seconds=parse_duration(engine_cfg.cooldown_window))
        self._counters = RecoveryCounters()
        executor = RecoveryExecutor(
            cluster=self._cluster,
            call_timeout=engine_cfg.call_timeout_seconds,
            max_replicas=engine_cfg.max_replicas,
        )
        self._processor = AlertProcessor(executor=executor, cooldown=self._cooldown, counters=self._counters)
        self._log.info(
            "recovery engine started",
            cooldown_window=engine_cfg.cooldown_window,
            call_timeout_seconds=engine_cfg.call_timeout_seconds,
            max_replicas=engine_cfg.max_replicas or None,
        )

    async def _start_rest(self) -> None:
        """Start the uvicorn server hosting the webhook."""
        assert self._log is not None
        assert self.config is not None
        assert self._processor is not None
        assert self._cooldown is not None
        assert self._counters is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from selfheal.api import build_app

            fastapi_app = build_app(
                processor=self._processor,
                cooldown=self._cooldown,
                counters=self._counters,
                config=self.config,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    def _start_counters_logger(self) -> None:
        """Launch a periodic task that logs the recovery counters."""
        assert self._log is not None
        assert self.config is not None
        interval = self.config.engine.counters_log_interval
        if interval <= 0:
            self._log.info("counters logger disabled")
            return

        counters = self._counters
        cooldown = self._cooldown
        log = self._log

        async def _reporter() -> None:
            while True:
                await asyncio.sleep(interval)
                if counters is not None and cooldown is not None:
                    log.info(
                        "recovery_counters",
                        counters=counters.snapshot(),
                        cooldowns_active=cooldown.active_count(),
                    )

        task = asyncio.create_task(_reporter(), name="counters-logger")
        self._background_tasks.append(task)
        self._log.info("counters logger started", interval_seconds=interval)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            # Never started
            return

        log = self._log or get_logger("app")
        log.info("selfheal shutting down")

        self._running = False

        if self._rest_server is not None:
            # Let uvicorn finish in-flight webhook deliveries before cancelling.
            self._rest_server.should_exit = True  # type: ignore[attr-defined]

        for task in reversed(self._background_tasks):
            if task.get_name() == "rest-server":
                try:
                    await asyncio.wait_for(task, timeout=_SHUTDOWN_GRACE_SECONDS)
                except TimeoutError:
                    log.warning("rest server stop timed out", timeout=_SHUTDOWN_GRACE_SECONDS)
                except Exception as exc:
                    log.error("rest server raised during shutdown", error=str(exc))
            elif not task.done():
                task.cancel()

        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

        await self._stop_cluster_client()

        log.info("selfheal stopped")

    async def _stop_cluster_client(self) -> None:
        """Close the kubernetes-asyncio ApiClient connection pool."""
        if self._cluster is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._cluster.close()
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._cluster = None


def _selfheal_version() -> str:
    from selfheal import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = SelfHealApp()
    loop = asyncio.get_running_loop()

    shutdown_task: asyncio.Task[None] | None = None

    def _request_shutdown() -> None:
        nonlocal shutdown_task
        if shutdown_task is not None:
            return
        shutdown_task = asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        # Block until shutdown is triggered (background tasks run concurrently)
        while app._running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        # A mandatory component failed; log and exit non-zero
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if shutdown_task is not None:
            await shutdown_task
        # Ensure stop runs even if start raises or is interrupted
        if app._running:
            await app.stop()
