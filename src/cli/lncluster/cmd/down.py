"""Command to remove every container lncluster has started."""

from concurrent.futures import ThreadPoolExecutor, as_completed

import click
from docker.errors import APIError, NotFound

from lncluster import utils
from lncluster.core.context import LNClusterContext
from lncluster.core.errors import TeardownFailure
from lncluster.settings import ROOT_LABEL, SHARED_NETWORK


@click.command(
    "down",
    help=(
        "Force-remove every container started by lncluster, including clusters "
        "left behind by 'spawn --detach' or 'spawn --no-rollback'."
    ),
)
@click.option(
    "-k",
    "--keep-network",
    is_flag=True,
    default=False,
    help="Do not remove the shared Docker network.",
)
@utils.exception_handler
@utils.pass_environment()
def cli(ctx: LNClusterContext, keep_network: bool) -> None:
    """
    Remove lncluster containers.

    Parameters
    ----------
    keep_network : bool
        If True, the shared network is left in place.
    """
    ctx.initialize()
    with ctx.logger.spinner("Removing containers..."):
        removed = _remove_containers(ctx)
        if not keep_network:
            _remove_network(ctx)
    if removed:
        ctx.logger.info(f"Removed {removed} lncluster container(s).")


def _remove_containers(ctx: LNClusterContext) -> int:
    containers = ctx.docker_client.containers.list(
        all=True, filters={"label": ROOT_LABEL}
    )
    if not containers:
        ctx.logger.info("No containers to remove.")
        return 0

    def remove(container) -> None:
        identifier = utils.generate_identifier(
            {"ID": container.short_id, "Name": container.name}
        )
        try:
            container.remove(force=True)
        except NotFound:
            return
        ctx.logger.debug(f"Removed container: {identifier}")

    with ThreadPoolExecutor() as executor:
        futures = {executor.submit(remove, c): c for c in containers}
        for future in as_completed(futures):
            container = futures[future]
            try:
                future.result()
            except Exception as e:
                raise TeardownFailure(
                    f"Error removing container '{container.name}': {str(e)}"
                ) from e
    return len(containers)


def _remove_network(ctx: LNClusterContext) -> None:
    try:
        ctx.docker_client.networks.get(SHARED_NETWORK).remove()
        ctx.logger.debug(f"Removed network: {SHARED_NETWORK}")
    except NotFound:
        pass
    except APIError as e:
        ctx.logger.warn(f"Could not remove network '{SHARED_NETWORK}': {e}")
