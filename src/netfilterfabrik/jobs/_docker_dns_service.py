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

"""Job forwarding DNS traffic to a server running in a container.

Queries reaching ``sourceIpAddress:sourcePortNumber`` on ``sourceLinkName``
are DNAT'ed to ``destinationIpAddress:destinationPortNumber``, the
translated traffic is accepted in FORWARD, and the original destination is
accepted in the job's own chain (linked into the services chain).
"""

from __future__ import annotations

import logging

from netfilterfabrik.core import Direction

from ._netfilter import (
    DNS_CHAIN_PREFIX,
    SERVICES_ACCESS_CHAIN,
    append_rule,
    delete_rule,
    egress,
    ingress,
    insert_rule,
    new_chain,
    teardown_chain,
)
from ._schemas import DnsForwardItem, DockerDnsServiceConfig
from ._workflow import ExecutionContext, Step

logger = logging.getLogger(__name__)

PROTOCOLS = ('tcp', 'udp')


def _dnat_spec(item: DnsForwardItem, protocol: str) -> str:
    return (
        f'-t nat -i {item.source_link_name} -p {protocol} -d {item.source_ip_address} '
        f'--dport {item.source_port_number} '
        f'-j DNAT --to {item.destination_ip_address}:{item.destination_port_number}'
    )


def _forward_spec(item: DnsForwardItem, protocol: str) -> str:
    return (
        f'-p {protocol} -d {item.destination_ip_address} '
        f'--dport {item.destination_port_number} -j ACCEPT'
    )


class DockerDnsServiceJob:
    name = 'services/docker-dns-service'

    def validate(self, context: ExecutionContext) -> None:
        context.configuration = DockerDnsServiceConfig.from_dict(context.job_configuration)

    def steps(self, direction: Direction) -> list[Step]:
        return [Step('generateRules', self.generate_rules)]

    def generate_rules(self, context: ExecutionContext) -> None:
        config: DockerDnsServiceConfig = context.configuration
        chain_in = ingress(DNS_CHAIN_PREFIX + config.chain_name)
        chain_out = egress(DNS_CHAIN_PREFIX + config.chain_name)
        services_in = ingress(SERVICES_ACCESS_CHAIN)
        services_out = egress(SERVICES_ACCESS_CHAIN)

        uninstall = [
            delete_rule(services_in, f'-j {chain_in}'),
            delete_rule(services_out, f'-j {chain_out}'),
            *teardown_chain(chain_in),
            *teardown_chain(chain_out),
        ]
        install = [new_chain(chain_in), new_chain(chain_out)]

        for item in config.items:
            logger.debug(
                'Forward %s:%d on %s to %s:%d',
                item.source_ip_address,
                item.source_port_number,
                item.source_link_name,
                item.destination_ip_address,
                item.destination_port_number,
            )
            for protocol in PROTOCOLS:
                install.append(insert_rule('PREROUTING', 1, _dnat_spec(item, protocol)))
                uninstall.append(delete_rule('PREROUTING', _dnat_spec(item, protocol)))
            for protocol in PROTOCOLS:
                install.append(insert_rule('FORWARD', 1, _forward_spec(item, protocol)))
                uninstall.append(delete_rule('FORWARD', _forward_spec(item, protocol)))
            for protocol in PROTOCOLS:
                install.append(
                    append_rule(
                        chain_in,
                        f'-p {protocol} -d {item.source_ip_address} --dport {item.source_port_number} -j ACCEPT',
                    )
                )

        logger.info('Last step RETURN')
        install += [append_rule(chain_in, '-j RETURN'), append_rule(chain_out, '-j RETURN')]

        logger.info('Install chain %s to the INPUT/OUTPUT', config.chain_name)
        install += [
            insert_rule(services_in, 1, f'-j {chain_in}'),
            insert_rule(services_out, 1, f'-j {chain_out}'),
        ]

        context.commands.extend(install, uninstall)
