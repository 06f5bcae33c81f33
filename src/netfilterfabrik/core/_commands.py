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

"""Command value types emitted by the jobs.

A :class:`Command` is the primitive output of every job: a subsystem kind
plus the literal argument string for the matching tool.  The argument
string is never interpreted here; applying it is left to whoever runs the
generated transcript.
"""

from __future__ import annotations

import dataclasses
from enum import StrEnum


class CommandKind(StrEnum):
    """Subsystem a command is addressed to."""

    IPTABLES4 = 'iptables-4'
    IPSET = 'ipset'


@dataclasses.dataclass(frozen=True, slots=True)
class Command:
    """One firewall primitive: ``kind`` selects the tool, ``arguments`` is passed verbatim."""

    kind: CommandKind
    arguments: str

    def __str__(self) -> str:
        return f'{self.kind}: {self.arguments}'


Transcript = list[Command]


@dataclasses.dataclass(slots=True)
class Commands:
    """Install and uninstall transcripts accumulated during one execution."""

    install: Transcript = dataclasses.field(default_factory=list)
    uninstall: Transcript = dataclasses.field(default_factory=list)

    def extend(self, install: Transcript, uninstall: Transcript) -> None:
        self.install.extend(install)
        self.uninstall.extend(uninstall)


def iptables4(arguments: str) -> Command:
    return Command(CommandKind.IPTABLES4, arguments)


def ipset(arguments: str) -> Command:
    return Command(CommandKind.IPSET, arguments)
