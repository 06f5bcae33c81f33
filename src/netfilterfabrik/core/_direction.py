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

from __future__ import annotations

from enum import StrEnum

from ._errors import InvalidDirectionError


class Direction(StrEnum):
    """Whether a job applies (install) or retracts (uninstall) its policy."""

    INSTALL = 'install'
    UNINSTALL = 'uninstall'

    @classmethod
    def parse(cls, token: Direction | str) -> Direction:
        """Return the direction for *token*, compared case-insensitively."""
        if isinstance(token, cls):
            return token
        if isinstance(token, str):
            try:
                return cls(token.strip().lower())
            except ValueError:
                pass
        raise InvalidDirectionError(f'Invalid command {token!r}')
