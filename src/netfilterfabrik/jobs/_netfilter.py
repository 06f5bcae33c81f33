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

"""iptables and ipset primitives shared by the jobs.

The chain and set names below are a public contract: service jobs link
their chains into the services chain created by the prepare-netfilter
job, so the names must stay stable.
"""

from __future__ import annotations

from netfilterfabrik.core import Command, ipset, iptables4

VITAL_ACCESS_CHAIN = 'vital_access_0'
BLOCK_ACCESS_CHAIN = 'block_access_0'
SERVICES_ACCESS_CHAIN = 'services_access_0'
TRUSTED_ACCESS_CHAIN = 'trusted_access_0'

BLOCK_SET = 'block_net'
TRUSTED_SET = 'trusted_net'

EPHEMERAL_PORTS = '1024:65535'
LOOPBACK_NETWORK = '127.0.0.0/8'

DNS_CHAIN_PREFIX = 'dns_'

# iptables rejects longer chain names
CHAIN_NAME_MAX_LENGTH = 28


def ingress(chain: str) -> str:
    """Name of the INPUT side of a managed chain."""
    return f'IN_{chain}'


def egress(chain: str) -> str:
    """Name of the OUTPUT side of a managed chain."""
    return f'OUT_{chain}'


def rule_spec(*parts: str | None) -> str:
    """Join non-empty rule fragments with single spaces."""
    return ' '.join(p for p in parts if p)


def new_chain(chain: str) -> Command:
    return iptables4(f'-N {chain}')


def flush_chain(chain: str) -> Command:
    return iptables4(f'-F {chain}')


def delete_chain(chain: str) -> Command:
    return iptables4(f'-X {chain}')


def append_rule(chain: str, *spec: str | None) -> Command:
    return iptables4(rule_spec(f'-A {chain}', *spec))


def insert_rule(chain: str, position: int, *spec: str | None) -> Command:
    return iptables4(rule_spec(f'-I {chain} {position}', *spec))


def delete_rule(chain: str, *spec: str | None) -> Command:
    return iptables4(rule_spec(f'-D {chain}', *spec))


def create_set(name: str, set_type: str = 'hash:net') -> Command:
    return ipset(f'-! create {name} {set_type}')


def destroy_set(name: str) -> Command:
    return ipset(f'-! destroy {name}')


def add_to_set(name: str, entry: str) -> Command:
    return ipset(f'-! add {name} {entry}')


def flush_set(name: str) -> Command:
    return ipset(f'flush {name}')


def teardown_chain(chain: str) -> list[Command]:
    """Uninstall counterpart of :func:`new_chain`: flush, then destroy."""
    return [flush_chain(chain), delete_chain(chain)]
