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

"""Convert the software77 IP-to-country CSV into a PostgreSQL dump.

Each input line describes an IPv4 range as two integers::

    "16777216","16777471","apnic","1313020800","AU","AUS","Australia"

A range rarely is a single CIDR block, so it is split with
:func:`ipaddress.summarize_address_range` and one row is written per
block into ``security.networks``.
"""

import argparse
import csv
import dataclasses
import datetime
import ipaddress
import logging
import sys
import uuid
from collections.abc import Iterable, Iterator
from pathlib import Path

import netfilterfabrik
from netfilterfabrik.cli import setup_logging
from netfilterfabrik.core import ValidationError

__author__ = 'Linuxfabrik GmbH, Zurich/Switzerland'

DESCRIPTION = """Convert the IP-to-country CSV file from http://software77.net/geo-ip/
into SQL loading the networks into the security.networks table."""

logger = logging.getLogger(__name__)

SQL_HEADER = [
    'SET statement_timeout = 0;',
    'SET lock_timeout = 0;',
    'SET idle_in_transaction_session_timeout = 0;',
    "SET client_encoding = 'UTF8';",
    'SET standard_conforming_strings = on;',
    'SET check_function_bodies = false;',
    'SET client_min_messages = warning;',
    'SET row_security = off;',
    'SET search_path = security, pg_catalog;',
    'COPY security.networks (uuid, network, registry, ctry, cntry, country, assigned, inserted) FROM stdin;',
]
SQL_COPY_END = '\\.'


@dataclasses.dataclass(frozen=True, slots=True)
class CountryRange:
    first: ipaddress.IPv4Address
    last: ipaddress.IPv4Address
    registry: str
    assigned: datetime.datetime
    ctry: str
    cntry: str
    country: str

    def networks(self) -> Iterator[ipaddress.IPv4Network]:
        return ipaddress.summarize_address_range(self.first, self.last)


def parse_ranges(lines: Iterable[str]) -> Iterator[CountryRange]:
    """Yield the ranges of a software77 CSV, skipping comments and blank lines."""
    for number, fields in enumerate(csv.reader(lines), start=1):
        if not fields or fields[0].lstrip().startswith('#'):
            continue
        fields = [f.strip() for f in fields]
        if len(fields) < 7:
            raise ValidationError(f'expected 7 fields, got {len(fields)}', f'line {number}')
        try:
            first = ipaddress.IPv4Address(int(fields[0]))
            last = ipaddress.IPv4Address(int(fields[1]))
            assigned = datetime.datetime.fromtimestamp(int(fields[3]), tz=datetime.UTC)
        except ValueError as e:
            raise ValidationError(str(e), f'line {number}') from e
        if last < first:
            raise ValidationError(f'range end {last} is before its start {first}', f'line {number}')
        yield CountryRange(
            first=first,
            last=last,
            registry=fields[2],
            assigned=assigned,
            ctry=fields[4],
            cntry=fields[5],
            country=fields[6],
        )


def _copy_escape(value: str) -> str:
    return value.replace('\\', '\\\\').replace('\t', '\\t').replace('\n', '\\n')


def to_sql(ranges: Iterable[CountryRange], inserted: datetime.datetime | None = None) -> str:
    if inserted is None:
        inserted = datetime.datetime.now(tz=datetime.UTC)
    lines = list(SQL_HEADER)
    for country_range in ranges:
        for network in country_range.networks():
            row = [
                str(uuid.uuid4()),
                str(network),
                country_range.registry,
                country_range.ctry,
                country_range.cntry,
                country_range.country,
                country_range.assigned.isoformat(),
                inserted.isoformat(),
            ]
            lines.append('\t'.join(_copy_escape(v) for v in row))
    lines.append(SQL_COPY_END)
    return '\n'.join(lines) + '\n'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='nff-country-sql',
        description=DESCRIPTION,
    )

    parser.add_argument(
        '-i',
        '--input-file-path',
        required=True,
        dest='INPUT',
        help='the input file as CSV',
    )

    parser.add_argument(
        '-o',
        '--output-file-path',
        required=True,
        dest='OUTPUT',
        help='output file path',
    )

    parser.add_argument(
        '-v',
        '--verbose',
        action='count',
        default=0,
        dest='VERBOSE',
        help='verbose output (repeat for higher verbosity)',
    )

    parser.add_argument(
        '-V',
        '--version',
        action='version',
        version=f'%(prog)s: v{netfilterfabrik.__version__} by {__author__}',
    )

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.VERBOSE)

    try:
        with Path(args.INPUT).open(encoding='utf-8', newline='') as f:
            sql = to_sql(parse_ranges(f))
    except OSError as e:
        print(f'Error: cannot read {args.INPUT}: {e}', file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f'Error: {args.INPUT} is not UTF-8 encoded: {e}', file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f'Error: {args.INPUT}: {e}', file=sys.stderr)
        return 1

    output = Path(args.OUTPUT)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(sql, encoding='utf-8')
    except OSError as e:
        print(f'Error: cannot write {args.OUTPUT}: {e}', file=sys.stderr)
        return 1

    logger.info('Wrote %s', output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
