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

"""Sources of blacklisted networks for the blacklist synchronisation job."""

from __future__ import annotations

import ipaddress
import logging
from typing import Protocol

import sqlalchemy
import sqlalchemy.exc

from ._errors import DataSourceError

logger = logging.getLogger(__name__)

DEFAULT_BLACKLIST_TABLE = 'blacklist_networks'
DEFAULT_BLACKLIST_SCHEMA = 'security'


class BlacklistSource(Protocol):
    """Anything that can list the IPv4 networks currently marked as blocked."""

    def fetch_networks(self) -> list[str]: ...


class SqlBlacklistSource:
    """Read blacklisted networks from a SQL table through SQLAlchemy.

    The table needs a ``value`` column holding the CIDR text and an
    ``ip_version`` column; only rows with ``ip_version = 4`` are read.
    A new engine is created for every fetch and disposed afterwards, so
    no connection outlives the job execution.
    """

    def __init__(
        self,
        connection_string: str,
        table: str = DEFAULT_BLACKLIST_TABLE,
        schema: str | None = DEFAULT_BLACKLIST_SCHEMA,
    ) -> None:
        self.connection_string = connection_string
        self.table = sqlalchemy.table(
            table,
            sqlalchemy.column('value'),
            sqlalchemy.column('ip_version'),
            schema=schema,
        )

    def _query(self) -> sqlalchemy.Select:
        return sqlalchemy.select(self.table.c.value).where(self.table.c.ip_version == 4)

    def fetch_networks(self) -> list[str]:
        try:
            engine = sqlalchemy.create_engine(self.connection_string, echo=False)
        except (sqlalchemy.exc.SQLAlchemyError, ImportError) as e:
            raise DataSourceError(f'Cannot connect to the blacklist database: {e}') from e

        try:
            with engine.connect() as conn:
                rows = conn.execute(self._query()).scalars().all()
        except sqlalchemy.exc.SQLAlchemyError as e:
            logger.error('Error while fetching blacklisted networks: %s', e)
            raise DataSourceError(f'Cannot fetch blacklisted networks: {e}') from e
        finally:
            engine.dispose()

        networks = []
        for value in rows:
            try:
                network = ipaddress.IPv4Network(str(value).strip(), strict=False)
            except ValueError as e:
                raise DataSourceError(f'Blacklist entry {value!r} is not an IPv4 network') from e
            networks.append(str(network))
        logger.debug('Fetched %d blacklisted networks', len(networks))
        return networks
