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

"""Job exposing a service's ports through a dedicated chain."""

from __future__ import annotations

import logging

from netfilterfabrik.core import Direction

from ._netfilter import (
    EPHEMERAL_PORTS,
    SERVICES_ACCESS_CHAIN,
    append_rule,
    delete_rule,
    egress,
    ingress,
    insert_rule,
    new_chain,
    teardown_chain,
)
from ._schemas import GenericServiceConfig
from ._workflow import ExecutionContext, Step

logger = logging.getLogger(__name__)


class GenericServiceJob:
    """Accept the configured ports in ``IN_<chainName>``.

    The chain is linked at the head of the services chain, so the service
    installed last is matched first.  Uninstall removes the links before
    flushing and destroying the chains.  Install and uninstall run the same
    steps since the job manages only its own chains.
    """

    name = 'engines/services/generic-service'

    def validate(self, context: ExecutionContext) -> None:
        context.configuration = GenericServiceConfig.from_dict(context.job_configuration)

    def steps(self, direction: Direction) -> list[Step]:
        return [Step('generateRules', self.generate_rules)]

    def generate_rules(self, context: ExecutionContext) -> None:
        config: GenericServiceConfig = context.configuration
        chain_in = ingress(config.chain_name)
        chain_out = egress(config.chain_name)
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
            destination = f'-d {item.destination_network}' if item.destination_network else None
            protocol = f'-p {item.protocol} --sport {EPHEMERAL_PORTS} --dport {item.port_number}'
            if not item.source_networks:
                logger.debug('Accept %s/%s from anywhere', item.port_number, item.protocol)
                install.append(append_rule(chain_in, destination, protocol, '-j ACCEPT'))
                continue
            for source in item.source_networks:
                logger.debug('Accept %s/%s from %s', item.port_number, item.protocol, source)
                install.append(append_rule(chain_in, f'-s {source}', destination, protocol, '-j ACCEPT'))

        logger.info('Last step RETURN')
        install += [append_rule(chain_in, '-j RETURN'), append_rule(chain_out, '-j RETURN')]

        logger.info('Install chain %s to the INPUT/OUTPUT', config.chain_name)
        install += [
            insert_rule(services_in, 1, f'-j {chain_in}'),
            insert_rule(services_out, 1, f'-j {chain_out}'),
        ]

        context.commands.extend(install, uninstall)
