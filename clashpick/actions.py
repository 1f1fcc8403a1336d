"""
Select and delay-test actions.

Both actions discover the controller, fetch a fresh catalog and resolve the
requested groups before doing their own work. Groups are handled one at a
time and the first failed selection stops the run.
"""

from __future__ import annotations

import logging
from typing import Callable

from clashpick.common.errors import ClashPickError
from clashpick.common.types import Catalog, FeatureMode, ProxyOrGroup, RunConfig
from clashpick.controller.client import ControllerClient
from clashpick.controller.discovery import port_decide
from clashpick.selection.resolver import LineReader, groups_resolve, node_resolve

__all__ = ["ClientFactory", "select_run", "delayTest_run", "feature_run"]

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], ControllerClient]


def client_open(config: RunConfig, client_factory: ClientFactory) -> ControllerClient:
    """Decide the port and bind a client to it"""
    port: int = port_decide(config.port, config.addr, config.scheme)
    return client_factory(config.baseUrl_build(port))


def groups_fetch(
    client: ControllerClient, config: RunConfig, read: LineReader
) -> tuple[Catalog, list[str]]:
    """
    Fetch the catalog and resolve configured groups.

    Returns:
        Catalog snapshot and resolved group names.
    """
    catalog: Catalog = client.catalog_fetch()
    group_names: list[str] = groups_resolve(config.groups, catalog, read)
    return catalog, group_names


def members_print(group: ProxyOrGroup) -> None:
    print(f"[Group {group.name}]")
    for i, member in enumerate(group.members):
        print(f"{i}.\t{member}")


def select_run(
    config: RunConfig,
    client_factory: ClientFactory = ControllerClient,
    read: LineReader = input,
) -> None:
    """
    Let the user pick a node in each resolved group and apply it.

    Args:
        config:
            Run configuration.
        client_factory:
            Builds a controller client from a base URL.
        read:
            Line reader for prompts.

    Raises:
        ClashPickError:
            Any discovery, fetch, resolution or selection failure. A failed
            selection leaves later groups untouched.
    """
    with client_open(config, client_factory) as client:
        catalog, group_names = groups_fetch(client, config, read)

        for group_name in group_names:
            group: ProxyOrGroup = catalog.by_name[group_name]
            members_print(group)
            print(f"\nCurrent group: {group_name}")
            print(f"Currently selected: {group.currentIndex_get()}. {group.current}\n")

            node: str = node_resolve("Select a node", group, catalog, optional=True, read=read)
            if not node:
                print("Not selecting for this group.")
                continue

            print(f"Selecting {node} for group {group_name}...", end="", flush=True)
            try:
                client.nodeSelection_apply(group_name, node)
            except ClashPickError as exc:
                print(f"FAIL: {exc}")
                raise
            print("OK")
            print()
            logger.info(f"Group {group_name} now uses {node}")


def delayTest_run(
    config: RunConfig,
    client_factory: ClientFactory = ControllerClient,
    read: LineReader = input,
) -> int:
    """
    Measure the delay of one node of the first resolved group.

    Args:
        config:
            Run configuration.
        client_factory:
            Builds a controller client from a base URL.
        read:
            Line reader for prompts.

    Returns:
        Measured delay in milliseconds.

    Raises:
        ClashPickError:
            Any discovery, fetch, resolution or measurement failure.
    """
    with client_open(config, client_factory) as client:
        catalog, group_names = groups_fetch(client, config, read)
        if len(group_names) > 1:
            print("Only one group allowed when you are doing delay test. Picking the first one")
        print()

        group: ProxyOrGroup = catalog.by_name[group_names[0]]
        members_print(group)

        node: str = node_resolve("\nSelect a node to test", group, catalog, optional=False, read=read)

        print(f"Testing {node}...", end="", flush=True)
        try:
            delay: int = client.delay_measure(node, config.test_url)
        except ClashPickError as exc:
            print(f"FAIL: {exc}")
            raise
        print(f"{delay} ms")
        return delay


def feature_run(
    config: RunConfig,
    client_factory: ClientFactory = ControllerClient,
    read: LineReader = input,
) -> None:
    """Run the action selected in config"""
    if config.feature is FeatureMode.DELAY_TEST:
        print("> Doing Delay Test")
        print()
        delayTest_run(config, client_factory, read)
    else:
        print("> Selecting Nodes")
        print()
        select_run(config, client_factory, read)
