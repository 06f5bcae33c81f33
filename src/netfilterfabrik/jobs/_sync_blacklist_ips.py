# Copyright (C) 2026 Linuxfabrik <info@linuxfabrik.ch>
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# On Debian systems, the complete text of the GNU General Public License
# version 2 can be found in /usr/share/common-licenses/GPL-2.
#
# SPDX-License-Identifier: GPL-2.0-or-later

"""Job filling the block set from the blacklist database.

The set itself and the chain using it belong to the prepare-netfilter job;
this job only adds entries (install) or flushes the set (uninstall).
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Callable

from netfilterfabrik.core import BlacklistSource, DataSourceError, Direction, SqlBlacklistSource

from ._netfilter import BLOCK_SET, add_to_set, flush_set
from ._schemas import SyncBlacklistConfig
from ._workflow import ExecutionContext, Step

logger = logging.getLogger(__name__)


def _network_key(network: ipaddress.IPv4Network) -> tuple:
    return (network.network_address, network.prefixlen)


def normalize_networks(entries: list[str]) -> list[str]:
    """Canonical, deduplicated and sorted form of the fetched entries.

    ``10.0.0.1/8`` and ``10.0.0.0/8`` name the same network and collapse
    into one entry.  The block set only holds IPv4 networks.
    """
    networks = set()
    for entry in entries:
        try:
            networks.add(ipaddress.IPv4Network(str(entry).strip(), strict=False))
        except ValueError as e:
            raise DataSourceError(f'Blacklist entry {entry!r} is not an IPv4 network') from e
    return [str(network) for network in sorted(networks, key=_network_key)]


def sql_source_factory(config: SyncBlacklistConfig) -> BlacklistSource:
    return SqlBlacklistSource(config.connection_string, table=config.table, schema=config.schema)


class SyncBlacklistIpsJob:
    """Synchronise the ``block_net`` set with the blacklisted networks.

    *source_factory* builds the data source from the validated
    configuration; it defaults to the SQL source.  The source is queried
    once per execution and its result is not cached.  Failures of the
    source are propagated as they are.
    """

    name = 'sync-blacklist-ips'

    def __init__(
        self,
        source_factory: Callable[[SyncBlacklistConfig], BlacklistSource] = sql_source_factory,
    ) -> None:
        self.source_factory = source_factory

    def validate(self, context: ExecutionContext) -> None:
        context.configuration = SyncBlacklistConfig.from_dict(context.job_configuration)

    def steps(self, direction: Direction) -> list[Step]:
        return [Step('fetchNetworks', self.fetch_networks)]

    def fetch_networks(self, context: ExecutionContext) -> None:
        source = self.source_factory(context.configuration)
        networks = source.fetch_networks()

        # independent of the order the source returns rows in
        networks = normalize_networks(networks)
        logger.info('Adding %d networks to %s', len(networks), BLOCK_SET)

        install = [add_to_set(BLOCK_SET, network) for network in networks]
        uninstall = [flush_set(BLOCK_SET)]
        context.commands.extend(install, uninstall)
