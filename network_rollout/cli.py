"""Main CLI entry point for the rollout engine."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from network_rollout.exceptions import ChangeNotSafeError, NetworkRolloutError
from network_rollout.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="network-rollout",
    help="Bootstrap and rollout decisions for the cluster network datapath",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")


@app.command()
def version() -> None:
    """Show version information."""
    from network_rollout import __version__

    typer.echo(f"network-rollout version {__version__}")


def _print_result(result) -> None:
    snapshot = result.snapshot
    decision = result.decision

    members_table = Table(title="Control Plane")
    members_table.add_column("Address", style="cyan")
    members_table.add_column("Initiator", style="magenta")
    for address in snapshot.members:
        members_table.add_row(address, "✓" if address == snapshot.initiator_address else "")
    console.print(members_table)

    if snapshot.timed_out:
        console.print("[yellow]Warning:[/yellow] control-plane discovery timed out")

    tiers_table = Table(title="Rollout Decision")
    tiers_table.add_column("Tier", style="cyan")
    tiers_table.add_column("Deployed Version", style="blue")
    tiers_table.add_column("Family Mode", style="yellow")
    tiers_table.add_column("Action", style="green")

    rows = [
        ("master", snapshot.existing_master, "update" if decision.update_master else "hold"),
        ("node", snapshot.existing_node, "update" if decision.update_node else "hold"),
        ("prepull", snapshot.existing_prepull, "render" if decision.render_prepull else "drop"),
    ]
    for name, tier, action in rows:
        deployed = tier.version if tier and tier.version else "-"
        family = tier.family_mode.value if tier and tier.family_mode else "-"
        style = "green" if action in ("update", "render") else "yellow"
        tiers_table.add_row(name, deployed, family, f"[{style}]{action}[/{style}]")
    console.print(tiers_table)

    console.print(f"\n[bold]Node mode:[/bold] {snapshot.node_mode.value}")
    console.print(f"[bold]Gateway mode:[/bold] {result.gateway_mode.value}")
    console.print(f"[bold]IP family mode:[/bold] {result.family_mode.value}")
    if result.migration_active:
        console.print("[yellow]IP family migration in progress; version sequencing skipped[/yellow]")


def _report_error(e: NetworkRolloutError) -> None:
    if isinstance(e, ChangeNotSafeError):
        console.print(f"[red]Error:[/red] {e.message}")
        for err in e.errors:
            console.print(f"  - {err}")
        return
    console.print(f"[red]Error:[/red] {e.message}")
    if e.details:
        console.print(f"\n{e.details}")


@app.command()
def simulate(
    scenario_path: Path = typer.Argument(..., help="YAML file describing the cluster state"),
) -> None:
    """
    Run a reconciliation pass against a scenario file.

    The scenario describes control-plane nodes, deployed tiers and
    configuration maps. Discovery runs on a simulated clock, so a short
    control plane does not block.

    Examples:
        network-rollout simulate upgrade.yaml
    """
    from network_rollout.bootstrap import ClusterBootstrap
    from network_rollout.engine import RolloutEngine
    from network_rollout.names import CLUSTER_INITIATOR_ANNOTATION
    from network_rollout.simulate import Scenario, ScenarioCluster, SimulatedClock
    from network_rollout.state import MemoryStateStore

    if not scenario_path.exists():
        console.print(f"[red]Error:[/red] Scenario file not found: {scenario_path}")
        raise typer.Exit(code=1)

    try:
        scenario = Scenario.load(str(scenario_path))
        cluster = ScenarioCluster(scenario)
        state = MemoryStateStore()
        if scenario.initiator:
            state.data[CLUSTER_INITIATOR_ANNOTATION] = scenario.initiator
        clock = SimulatedClock()
        bootstrapper = ClusterBootstrap(cluster, state, sleep=clock.sleep, clock=clock)
        engine = RolloutEngine(cluster, bootstrapper, scenario.release_version)
        result = engine.run_pass(scenario.network_spec(), scenario.previous_network_spec())
    except NetworkRolloutError as e:
        logger.error(f"Simulation failed: {e.message}")
        _report_error(e)
        raise typer.Exit(code=1)

    _print_result(result)
    for key, value in state.writes:
        console.print(f"[bold]Would persist:[/bold] {key}={value}")


@app.command()
def plan(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Path to a YAML rollout configuration file"
    ),
    persist: bool = typer.Option(
        False,
        "--persist/--no-persist",
        help="Write the elected initiator back to the network configuration",
    ),
) -> None:
    """
    Run a reconciliation pass against the live cluster and show the decision.

    Reads control-plane nodes, the deployed datapath tiers and the network
    configuration from the cluster in the current kubeconfig context.
    Nothing is written unless --persist is given.

    Examples:
        # Show what the next pass would do
        network-rollout plan

        # Use a release version from the environment
        RELEASE_VERSION=4.11.0 network-rollout plan
    """
    from network_rollout.bootstrap import ClusterBootstrap
    from network_rollout.config import RolloutConfig
    from network_rollout.engine import RolloutEngine
    from network_rollout.kube import KubeCluster, load_client_config
    from network_rollout.names import CLUSTER_INITIATOR_ANNOTATION
    from network_rollout.state import MemoryStateStore

    try:
        base = RolloutConfig.load(config_path) if config_path else None
        settings = RolloutConfig.from_env(base)
        if not settings.release_version:
            console.print("[red]Error:[/red] No release version configured")
            console.print("Set RELEASE_VERSION or release_version in the configuration file")
            raise typer.Exit(code=1)

        load_client_config()
        cluster = KubeCluster(
            namespace=settings.namespace, operator_namespace=settings.operator_namespace
        )
        store = cluster.annotation_store()
        spec = store.read_network_spec()

        state = store
        if not persist:
            current = store.get(CLUSTER_INITIATOR_ANNOTATION)
            state = MemoryStateStore({CLUSTER_INITIATOR_ANNOTATION: current} if current else {})

        bootstrapper = ClusterBootstrap(
            cluster.node_directory(settings.control_plane_label),
            state,
            poll_interval=settings.poll_interval,
            discovery_timeout=settings.discovery_timeout,
            backoff=settings.discovery_backoff,
            min_timeout=settings.min_discovery_timeout,
        )
        engine = RolloutEngine(cluster, bootstrapper, settings.release_version)
        result = engine.run_pass(spec)
    except NetworkRolloutError as e:
        logger.error(f"Plan failed: {e.message}")
        _report_error(e)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Plan interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    _print_result(result)


if __name__ == "__main__":
    app()
