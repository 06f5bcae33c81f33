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

"""Typed job configurations.

Each job validates its raw configuration mapping into one of these frozen
dataclasses before generating any command.  ``from_dict`` applies the
defaults and raises :class:`~netfilterfabrik.core.ValidationError` on the
first structural violation; the generators can therefore rely on every
field being present and well formed.

The YAML keys keep the camelCase names of the configuration files
(``primaryInterfaces``, ``portNumber``, ...).
"""

from __future__ import annotations

import dataclasses
from typing import Any

from netfilterfabrik.core import NetworkEntry
from netfilterfabrik.core._blacklist_source import (
    DEFAULT_BLACKLIST_SCHEMA,
    DEFAULT_BLACKLIST_TABLE,
)
from netfilterfabrik.core._validation import (
    get_address,
    get_address_or_network,
    get_connection_url,
    get_list,
    get_mapping,
    get_port,
    get_string,
    get_token,
    join_path,
    parse_address_or_network,
    parse_network_entries,
    require_mapping,
)

from ._netfilter import CHAIN_NAME_MAX_LENGTH, DNS_CHAIN_PREFIX, egress

DEFAULT_SERVICE_CHAIN_NAME = 'genericServiceName'
DEFAULT_DNS_CHAIN_NAME = 'dockerDnsService'
DEFAULT_DNS_PORT = 53

# IFNAMSIZ without the trailing NUL
INTERFACE_NAME_MAX_LENGTH = 15


def _items(data: Any, path: str = '') -> list[tuple[str, dict]]:
    """Return ``(path, item)`` pairs of the required ``network.items`` list."""
    data = require_mapping(data, path)
    network = get_mapping(data, 'network', path)
    items_path = join_path(join_path(path, 'network'), 'items')
    result = []
    for i, item in enumerate(get_list(network, 'items', join_path(path, 'network'))):
        item_path = join_path(items_path, i)
        result.append((item_path, require_mapping(item, item_path)))
    return result


# -- prepare-netfilter --


@dataclasses.dataclass(frozen=True, slots=True)
class PrimaryInterface:
    name: str
    networks: tuple[NetworkEntry, ...]
    input_default_action: str
    output_default_action: str

    @classmethod
    def from_dict(cls, data: Any, path: str) -> PrimaryInterface:
        data = require_mapping(data, path)
        rules = get_mapping(data, 'rules', path)
        rules_path = join_path(path, 'rules')
        rules_in = get_mapping(rules, 'input', rules_path)
        rules_out = get_mapping(rules, 'output', rules_path)
        networks_path = join_path(path, 'networks')
        return cls(
            name=get_token(data, 'name', path, max_length=INTERFACE_NAME_MAX_LENGTH),
            networks=parse_network_entries(get_list(data, 'networks', path), networks_path),
            input_default_action=get_token(rules_in, 'defaultAction', join_path(rules_path, 'input')),
            output_default_action=get_token(
                rules_out, 'defaultAction', join_path(rules_path, 'output')
            ),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class PrepareNetfilterConfig:
    trusted_items: tuple[NetworkEntry, ...]
    primary_interfaces: tuple[PrimaryInterface, ...]
    global_trusted_items: tuple[NetworkEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Any, global_trusted_items: list | None = None) -> PrepareNetfilterConfig:
        data = require_mapping(data, '')
        network = get_mapping(data, 'network')
        interfaces = get_list(network, 'primaryInterfaces', 'network')
        interfaces_path = 'network.primaryInterfaces'
        return cls(
            trusted_items=parse_network_entries(
                get_list(network, 'trustedItems', 'network', required=False),
                'network.trustedItems',
            ),
            primary_interfaces=tuple(
                PrimaryInterface.from_dict(item, join_path(interfaces_path, i))
                for i, item in enumerate(interfaces)
            ),
            global_trusted_items=parse_network_entries(
                global_trusted_items, 'global.network.trustedItems'
            ),
        )

    @property
    def trusted_networks(self) -> list[str]:
        """Global trusted networks first, then the job's own, order preserved."""
        return [item.value for item in (*self.global_trusted_items, *self.trusted_items)]


# -- engines/services/generic-service --


@dataclasses.dataclass(frozen=True, slots=True)
class ServiceItem:
    port_number: int
    protocol: str
    source_networks: tuple[str, ...] = ()
    destination_network: str | None = None

    @classmethod
    def from_dict(cls, data: dict, path: str) -> ServiceItem:
        sources_path = join_path(path, 'sourceNetworks')
        sources = get_list(data, 'sourceNetworks', path, required=False) or []
        return cls(
            port_number=get_port(data, 'portNumber', path),
            protocol=get_token(data, 'protocol', path),
            source_networks=tuple(
                parse_address_or_network(n, join_path(sources_path, i))
                for i, n in enumerate(sources)
            ),
            destination_network=get_address_or_network(
                data, 'destinationNetwork', path, required=False
            ),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class GenericServiceConfig:
    chain_name: str
    items: tuple[ServiceItem, ...]

    @classmethod
    def from_dict(cls, data: Any) -> GenericServiceConfig:
        items = tuple(ServiceItem.from_dict(item, path) for path, item in _items(data))
        return cls(
            chain_name=get_token(
                data,
                'chainName',
                required=False,
                default=DEFAULT_SERVICE_CHAIN_NAME,
                max_length=CHAIN_NAME_MAX_LENGTH - len(egress('')),
            ),
            items=items,
        )


# -- services/docker-dns-service --


@dataclasses.dataclass(frozen=True, slots=True)
class DnsForwardItem:
    source_link_name: str
    source_ip_address: str
    destination_ip_address: str
    destination_port_number: int
    source_port_number: int = DEFAULT_DNS_PORT

    @classmethod
    def from_dict(cls, data: dict, path: str) -> DnsForwardItem:
        return cls(
            source_link_name=get_token(
                data, 'sourceLinkName', path, max_length=INTERFACE_NAME_MAX_LENGTH
            ),
            source_ip_address=get_address(data, 'sourceIpAddress', path),
            destination_ip_address=get_address(data, 'destinationIpAddress', path),
            destination_port_number=get_port(data, 'destinationPortNumber', path),
            source_port_number=get_port(
                data, 'sourcePortNumber', path, required=False, default=DEFAULT_DNS_PORT
            ),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class DockerDnsServiceConfig:
    chain_name: str
    items: tuple[DnsForwardItem, ...]

    @classmethod
    def from_dict(cls, data: Any) -> DockerDnsServiceConfig:
        items = tuple(DnsForwardItem.from_dict(item, path) for path, item in _items(data))
        return cls(
            chain_name=get_token(
                data,
                'chainName',
                required=False,
                default=DEFAULT_DNS_CHAIN_NAME,
                max_length=CHAIN_NAME_MAX_LENGTH - len(egress(DNS_CHAIN_PREFIX)),
            ),
            items=items,
        )


# -- sync-blacklist-ips --


@dataclasses.dataclass(frozen=True, slots=True)
class SyncBlacklistConfig:
    connection_string: str
    table: str = DEFAULT_BLACKLIST_TABLE
    schema: str = DEFAULT_BLACKLIST_SCHEMA

    @classmethod
    def from_dict(cls, data: Any) -> SyncBlacklistConfig:
        data = require_mapping(data, '')
        database = get_mapping(data, 'database')
        return cls(
            connection_string=get_connection_url(database, 'connectionString', 'database'),
            table=get_string(database, 'table', 'database', required=False, default=DEFAULT_BLACKLIST_TABLE),
            schema=get_string(
                database, 'schema', 'database', required=False, default=DEFAULT_BLACKLIST_SCHEMA
            ),
        )
