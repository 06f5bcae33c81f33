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

"""Exception hierarchy shared by the jobs, the workflow and the CLIs."""


class NetfilterFabrikError(Exception):
    """Base class for all errors raised by netfilterfabrik."""


class ValidationError(NetfilterFabrikError):
    """Malformed or missing policy field.

    ``path`` is the dotted location of the offending field inside the
    validated document (e.g. ``network.items[0].portNumber``), or an
    empty string when the document itself is wrong.
    """

    def __init__(self, message: str, path: str = '') -> None:
        self.message = message
        self.path = path
        text = f'Invalid configuration: {path}: {message}' if path else f'Invalid configuration: {message}'
        super().__init__(text)


class ConfigurationError(ValidationError):
    """The configuration file does not contain the requested configuration or job entry."""


class InvalidDirectionError(NetfilterFabrikError):
    """Direction token is neither ``install`` nor ``uninstall``."""


class JobNotFoundError(NetfilterFabrikError):
    """No job is registered under the requested name."""


class DataSourceError(NetfilterFabrikError):
    """Fetching data from an external source failed."""
