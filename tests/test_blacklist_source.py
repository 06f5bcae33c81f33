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

"""Tests for the SQL blacklist source, backed by a SQLite file."""

import pytest
import sqlalchemy

from netfilterfabrik.core import DataSourceError, SqlBlacklistSource


@pytest.fixture
def blacklist_db(tmp_path):
    url = f'sqlite:///{tmp_path / "blacklist.db"}'
    engine = sqlalchemy.create_engine(url)
    with engine.begin() as conn:
        conn.execute(sqlalchemy.text('CREATE TABLE blacklist_networks (value TEXT, ip_version INTEGER)'))
        conn.execute(
            sqlalchemy.text('INSERT INTO blacklist_networks (value, ip_version) VALUES (:value, :version)'),
            [
                {'value': '203.0.113.0/24', 'version': 4},
                {'value': '2001:db8::/32', 'version': 6},
                {'value': '198.51.100.7', 'version': 4},
                {'value': '10.1.2.3/8', 'version': 4},
            ],
        )
    engine.dispose()
    return url


class TestSqlBlacklistSource:
    def test_fetch_ipv4_networks(self, blacklist_db):
        source = SqlBlacklistSource(blacklist_db, schema=None)
        assert sorted(source.fetch_networks()) == [
            '10.0.0.0/8',
            '198.51.100.7/32',
            '203.0.113.0/24',
        ]

    def test_schema_qualified_table(self, blacklist_db):
        source = SqlBlacklistSource(blacklist_db, schema='main')
        assert len(source.fetch_networks()) == 3

    def test_missing_table(self, blacklist_db):
        source = SqlBlacklistSource(blacklist_db, table='no_such_table', schema=None)
        with pytest.raises(DataSourceError, match='Cannot fetch blacklisted networks'):
            source.fetch_networks()

    def test_invalid_entry(self, blacklist_db):
        engine = sqlalchemy.create_engine(blacklist_db)
        with engine.begin() as conn:
            conn.execute(sqlalchemy.text("INSERT INTO blacklist_networks VALUES ('spammer', 4)"))
        engine.dispose()
        with pytest.raises(DataSourceError, match="'spammer' is not an IPv4 network"):
            SqlBlacklistSource(blacklist_db, schema=None).fetch_networks()

    def test_unknown_dialect(self):
        with pytest.raises(DataSourceError, match='Cannot connect'):
            SqlBlacklistSource('nosuchdb://user@host/db').fetch_networks()
