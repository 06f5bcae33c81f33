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

from ._blacklist_source import BlacklistSource, SqlBlacklistSource
from ._commands import Command, CommandKind, Commands, Transcript, ipset, iptables4
from ._configuration import (
    Configuration,
    ConfigurationItem,
    JobEntry,
    load_configuration,
)
from ._direction import Direction
from ._errors import (
    ConfigurationError,
    DataSourceError,
    InvalidDirectionError,
    JobNotFoundError,
    NetfilterFabrikError,
    ValidationError,
)
from ._validation import NetworkEntry

__all__ = [
    'BlacklistSource',
    'Command',
    'CommandKind',
    'Commands',
    'Configuration',
    'ConfigurationError',
    'ConfigurationItem',
    'DataSourceError',
    'Direction',
    'InvalidDirectionError',
    'JobEntry',
    'JobNotFoundError',
    'NetfilterFabrikError',
    'NetworkEntry',
    'SqlBlacklistSource',
    'Transcript',
    'ValidationError',
    'ipset',
    'iptables4',
    'load_configuration',
]
