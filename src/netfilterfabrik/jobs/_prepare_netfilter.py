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

"""Job preparing netfilter for the other jobs.

Creates the vital, block, services and trusted chains and wires them into
INPUT/OUTPUT.  Install runs the generators in the order

    vital -> block -> services -> trusted -> root

so every chain exists and is populated before the root chains jump to it.
Uninstall runs the same generators in exactly the reverse order: the
jumps from INPUT/OUTPUT are removed first, then each chain is flushed and
destroyed.
"""

from __future__ import annotations

import logging

from netfilterfabrik.core import Command, Direction

from ._netfilter import (
    BLOCK_ACCESS_CHAIN,
    BLOCK_SET,
    EPHEMERAL_PORTS,
    LOOPBACK_NETWORK,
    SERVICES_ACCESS_CHAIN,
    TRUSTED_ACCESS_CHAIN,
    TRUSTED_SET,
    VITAL_ACCESS_CHAIN,
    add_to_set,
    append_rule,
    create_set,
    delete_rule,
    destroy_set,
    egress,
    ingress,
    insert_rule,
    new_chain,
    teardown_chain,
)
from ._schemas import PrepareNetfilterConfig
from ._workflow import ExecutionContext, Step

logger = logging.getLogger(__name__)

STATE_NEW = '-m state --state NEW,ESTABLISHED,RELATED'
STATE_ESTABLISHED = '-m state --state ESTABLISHED,RELATED'


class PrepareNetfilterJob:
    """Compile the base chains every host needs."""

    name = 'prepare-netfilter'

    def validate(self, context: ExecutionContext) -> None:
        context.configuration = PrepareNetfilterConfig.from_dict(
            context.job_configuration,
            context.global_trusted_items,
        )

    def steps(self, direction: Direction) -> list[Step]:
        steps = [
            Step('generateVitalAccessChain', self.generate_vital_access_chain),
            Step('generateBlockNetworkChain', self.generate_block_network_chain),
            Step('generateServiceAccessChain', self.generate_service_access_chain),
            Step('generateTrustedNetworkChain', self.generate_trusted_network_chain),
            Step('generateRootAccessChains', self.generate_root_access_chains),
        ]
        if direction is Direction.UNINSTALL:
            steps.reverse()
        return steps

    def generate_vital_access_chain(self, context: ExecutionContext) -> None:
        """Traffic the host cannot live without: DHCP, DNS, ICMP, NTP, root, loopback."""
        config: PrepareNetfilterConfig = context.configuration
        chain_in = ingress(VITAL_ACCESS_CHAIN)
        chain_out = egress(VITAL_ACCESS_CHAIN)

        install: list[Command] = [new_chain(chain_in), new_chain(chain_out)]
        uninstall: list[Command] = [*teardown_chain(chain_in), *teardown_chain(chain_out)]

        for interface in config.primary_interfaces:
            iface_in = f'--in-interface {interface.name}'
            iface_out = f'--out-interface {interface.name}'

            logger.info('Adding DHCP for %s', interface.name)
            install += [
                append_rule(chain_in, iface_in, '-p udp --dport 67:68 --sport 67:68 -j ACCEPT'),
                append_rule(chain_out, iface_out, '-p udp --dport 67:68 --sport 67:68 -j ACCEPT'),
            ]

            logger.info('Adding dns client for %s', interface.name)
            for protocol in ('udp', 'tcp'):
                install += [
                    append_rule(
                        chain_out,
                        iface_out,
                        f'-p {protocol} --sport {EPHEMERAL_PORTS} --dport 53',
                        STATE_NEW,
                        '-j ACCEPT',
                    ),
                    append_rule(
                        chain_in,
                        iface_in,
                        f'-p {protocol} --sport 53 --dport {EPHEMERAL_PORTS}',
                        STATE_ESTABLISHED,
                        '-j ACCEPT',
                    ),
                ]

            logger.info('Adding icmp for %s', interface.name)
            install += [
                append_rule(chain_out, '-p icmp', iface_out, '-d 0.0.0.0/0', STATE_NEW, '-j ACCEPT'),
                append_rule(chain_in, '-p icmp', iface_in, '-s 0.0.0.0/0', STATE_ESTABLISHED, '-j ACCEPT'),
                append_rule(
                    chain_in, '-p icmp --icmp-type 8', iface_in, '-s 0.0.0.0/0', STATE_NEW, '-j ACCEPT'
                ),
                append_rule(chain_out, '-p icmp', iface_out, '-d 0.0.0.0/0', STATE_ESTABLISHED, '-j ACCEPT'),
            ]

            logger.info('Adding ntp for %s', interface.name)
            install += [
                append_rule(chain_out, iface_out, f'-p udp --sport {EPHEMERAL_PORTS} --dport 123 -j ACCEPT'),
                append_rule(
                    chain_in,
                    iface_in,
                    f'-p udp --sport 123 --dport {EPHEMERAL_PORTS}',
                    STATE_ESTABLISHED,
                    '-j ACCEPT',
                ),
            ]

            logger.info('Adding root access for %s', interface.name)
            install.append(append_rule(chain_out, iface_out, '-m owner --uid-owner 0 -j ACCEPT'))

            logger.info('Adding accept known packets for %s', interface.name)
            install.append(append_rule(chain_in, iface_in, STATE_ESTABLISHED, '-j ACCEPT'))

            for network in interface.networks:
                logger.info('Adding lo for network %s', network.value)
                install += [
                    append_rule(chain_in, f'--in-interface lo -s {network.value} -d {network.value} -j ACCEPT'),
                    append_rule(chain_in, f'--in-interface lo -s {network.value} -d {LOOPBACK_NETWORK} -j ACCEPT'),
                    append_rule(chain_out, f'--out-interface lo -s {network.value} -d {network.value} -j ACCEPT'),
                    append_rule(chain_out, f'--out-interface lo -s {network.value} -d {LOOPBACK_NETWORK} -j ACCEPT'),
                ]

        install += [
            append_rule(chain_in, f'! --in-interface lo -d {LOOPBACK_NETWORK} -j REJECT'),
            append_rule(chain_out, f'--out-interface lo -d {LOOPBACK_NETWORK} -j ACCEPT'),
        ]

        logger.info('Last step RETURN')
        install += [append_rule(chain_in, '-j RETURN'), append_rule(chain_out, '-j RETURN')]

        context.commands.extend(install, uninstall)

    def generate_block_network_chain(self, context: ExecutionContext) -> None:
        """Drop everything jumping here; INPUT only jumps for sources in the block set."""
        chain_in = ingress(BLOCK_ACCESS_CHAIN)

        logger.debug("Create the chain '%s'", chain_in)
        install = [new_chain(chain_in)]
        uninstall = teardown_chain(chain_in)

        # Entries are added by the sync-blacklist-ips job
        logger.debug("Add create ipset net '%s'", BLOCK_SET)
        install.append(create_set(BLOCK_SET))
        uninstall.append(destroy_set(BLOCK_SET))

        logger.debug("Configure chain '%s'", chain_in)
        install.append(append_rule(chain_in, '-j DROP'))

        context.commands.extend(install, uninstall)

    def generate_service_access_chain(self, context: ExecutionContext) -> None:
        """Empty pass-through chains the service jobs link their own chains into."""
        install = []
        uninstall = []
        for chain in (ingress(SERVICES_ACCESS_CHAIN), egress(SERVICES_ACCESS_CHAIN)):
            logger.debug("Create the chain '%s'", chain)
            install += [new_chain(chain), append_rule(chain, '-j RETURN')]
            uninstall += teardown_chain(chain)

        context.commands.extend(install, uninstall)

    def generate_trusted_network_chain(self, context: ExecutionContext) -> None:
        """Accept anything from/to the trusted set, filled from global and job networks."""
        config: PrepareNetfilterConfig = context.configuration

        logger.debug("Add create ipset net '%s'", TRUSTED_SET)
        install = [create_set(TRUSTED_SET)]
        uninstall = []

        for network in config.trusted_networks:
            logger.debug("Add trusted network '%s'", network)
            install.append(add_to_set(TRUSTED_SET, network))

        for chain, match in ((ingress(TRUSTED_ACCESS_CHAIN), 'src'), (egress(TRUSTED_ACCESS_CHAIN), 'dst')):
            logger.debug("Create the chain '%s'", chain)
            install += [
                new_chain(chain),
                append_rule(chain, f'-m set --match-set {TRUSTED_SET} {match} -j ACCEPT'),
                append_rule(chain, '-j RETURN'),
            ]
            uninstall += teardown_chain(chain)

        uninstall.append(destroy_set(TRUSTED_SET))

        context.commands.extend(install, uninstall)

    def generate_root_access_chains(self, context: ExecutionContext) -> None:
        """Link the managed chains into INPUT and OUTPUT.

        INPUT: trusted (1), vital (2), block for sources in the block set (3),
        services (4), then one default action per primary interface at the
        end.  OUTPUT: trusted (1), vital (2), services (3).
        """
        config: PrepareNetfilterConfig = context.configuration

        links = [
            ('INPUT', 1, None, ingress(TRUSTED_ACCESS_CHAIN)),
            ('INPUT', 2, None, ingress(VITAL_ACCESS_CHAIN)),
            ('INPUT', 3, f'-m set --match-set {BLOCK_SET} src', ingress(BLOCK_ACCESS_CHAIN)),
            ('INPUT', 4, None, ingress(SERVICES_ACCESS_CHAIN)),
        ]

        install = []
        uninstall = []
        for parent, position, match, chain in links:
            logger.debug("Link '%s' into %s at %d", chain, parent, position)
            install.append(insert_rule(parent, position, match, f'-j {chain}'))
            uninstall.append(delete_rule(parent, match, f'-j {chain}'))

        for interface in config.primary_interfaces:
            spec = f'--in-interface {interface.name} -j {interface.input_default_action}'
            logger.debug("Default action for '%s': %s", interface.name, interface.input_default_action)
            install.append(append_rule('INPUT', spec))
            uninstall.append(delete_rule('INPUT', spec))

        for position, chain in enumerate(
            (egress(TRUSTED_ACCESS_CHAIN), egress(VITAL_ACCESS_CHAIN), egress(SERVICES_ACCESS_CHAIN)),
            start=1,
        ):
            logger.debug("Link '%s' into OUTPUT at %d", chain, position)
            install.append(insert_rule('OUTPUT', position, f'-j {chain}'))
            uninstall.append(delete_rule('OUTPUT', f'-j {chain}'))

        uninstall.reverse()
        context.commands.extend(install, uninstall)
