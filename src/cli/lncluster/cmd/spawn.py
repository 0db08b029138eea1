"""Command to spawn a cluster."""

import json
import os

import click

from lncluster import utils
from lncluster.core.cluster.orchestrator import ClusterOrchestrator, ClusterRequest
from lncluster.core.context import LNClusterContext
from lncluster.core.errors import LNClusterError, UserError
from lncluster.shutdown import shutdown_event


@click.command(
    "spawn",
    help=(
        "Spawn a cluster of LND nodes on a private regtest chain. Every node's "
        "chain backend is peered with every other one.\n\n"
        "Node details are printed as JSON. The cluster is torn down on Ctrl-C "
        "unless --detach is given."
    ),
)
@click.option(
    "-s",
    "--size",
    default=1,
    type=click.IntRange(min=0),
    help="Number of nodes (default: 1; 0 also means 1).",
)
@click.option(
    "--lnd-config",
    "lnd_configuration",
    default="",
    type=str,
    help="Extra LND command-line flags, passed to every node as-is.",
)
@click.option(
    "-n",
    "--no-rollback",
    is_flag=True,
    default=False,
    help="Leave started nodes running if the spawn fails.",
)
@click.option(
    "-d",
    "--detach",
    is_flag=True,
    default=False,
    help="Leave the cluster running and exit.",
)
@utils.exception_handler
@utils.pass_environment()
def cli(
    ctx: LNClusterContext,
    size: int,
    lnd_configuration: str,
    no_rollback: bool,
    detach: bool,
) -> None:
    """Spawn a cluster and keep it alive until interrupted.

    Parameters
    ----------
    size : int
        Number of nodes.
    lnd_configuration : str
        Extra LND flags.
    no_rollback : bool
        If True, nodes started by a failed spawn are left running.
    detach : bool
        If True, exit immediately after printing node details.
    """
    ctx.initialize()
    request = ClusterRequest(lnd_configuration=lnd_configuration or None, size=size)
    orchestrator = ClusterOrchestrator(ctx, no_rollback=no_rollback)

    try:
        with ctx.logger.spinner(f"Spawning {request.count} node(s)..."):
            cluster = orchestrator.spawn(request).result()
    except UserError:
        raise
    except LNClusterError as e:
        crashdump = _write_crashdump(ctx)
        raise LNClusterError(f"{e.msg}\nFull spawn log written to {crashdump}") from e

    click.echo(json.dumps(cluster.to_dict(), indent=2))
    if detach:
        ctx.logger.info("Cluster left running. Remove it with 'lncluster down'.")
        return

    ctx.logger.info("Cluster is up. Press Ctrl-C to tear it down.")
    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        pass
    with ctx.logger.spinner("Tearing down cluster..."):
        cluster.kill()


def _write_crashdump(ctx: LNClusterContext) -> str:
    """Write every captured log line to `~/.lncluster/crashdump.log`."""
    os.makedirs(ctx.user_dir, exist_ok=True)
    crashdump = os.path.join(ctx.user_dir, "crashdump.log")
    with open(crashdump, "w") as f:
        for msg, _ in ctx.logger.log_buffer:
            f.write(msg + "\n")
    return crashdump
