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

"""Field readers used by the job schemas.

Every reader takes the parent mapping, the key to read and the dotted
path of the parent, and either returns the checked (and defaulted) value
or raises :class:`ValidationError` naming the full path of the field.
A ``None`` value is treated like a missing key.  Unknown keys are never
an error; the schemas simply do not look at them.
"""

from __future__ import annotations

import dataclasses
import ipaddress
import re
from typing import Any

import sqlalchemy.engine
import sqlalchemy.exc

from ._errors import ValidationError

_MISSING = object()

POSTGRES_BACKENDS = frozenset({'postgres', 'postgresql'})
POSTGRES_DEFAULT_DRIVER = 'psycopg'

# chain, target, interface and protocol names end up unquoted in shell scripts
TOKEN_PATTERN = re.compile(r'^[A-Za-z0-9_.:@+-]+$')


def join_path(path: str, key: str | int) -> str:
    """Append a mapping key or list index to a dotted path."""
    if isinstance(key, int):
        return f'{path}[{key}]'
    if not path:
        return key
    return f'{path}.{key}'


def _lookup(data: dict, key: str, path: str, required: bool) -> Any:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError('is required', join_path(path, key))
        return _MISSING
    return value


def require_mapping(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f'must be a mapping, got {type(value).__name__}', path)
    return value


def get_mapping(data: dict, key: str, path: str = '', *, required: bool = True) -> dict | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return None
    return require_mapping(value, join_path(path, key))


def get_list(data: dict, key: str, path: str = '', *, required: bool = True) -> list | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return None
    if not isinstance(value, list):
        raise ValidationError(
            f'must be a list, got {type(value).__name__}', join_path(path, key)
        )
    return value


def parse_string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f'must be a string, got {type(value).__name__}', path)
    value = value.strip()
    if not value:
        raise ValidationError('must not be empty', path)
    return value


def get_string(
    data: dict,
    key: str,
    path: str = '',
    *,
    required: bool = True,
    default: str | None = None,
) -> str | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return default
    return parse_string(value, join_path(path, key))


def parse_token(value: Any, path: str, max_length: int | None = None) -> str:
    """A single command line word: letters, digits and ``_ . : @ + -`` only."""
    text = parse_string(value, path)
    if not TOKEN_PATTERN.match(text):
        raise ValidationError(
            f'{text!r} may only contain letters, digits and the characters _ . : @ + -', path
        )
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f'{text!r} is longer than {max_length} characters', path)
    return text


def get_token(
    data: dict,
    key: str,
    path: str = '',
    *,
    required: bool = True,
    default: str | None = None,
    max_length: int | None = None,
) -> str | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return default
    return parse_token(value, join_path(path, key), max_length)


def parse_port(value: Any, path: str) -> int:
    """Accept an int or a string of digits in the range 0..65535."""
    if isinstance(value, bool):
        raise ValidationError('must be a port number', path)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValidationError(f'must be a port number, got {value!r}', path)
    if not 0 <= value <= 65535:
        raise ValidationError(f'port number {value} is out of range', path)
    return value


def get_port(
    data: dict,
    key: str,
    path: str = '',
    *,
    required: bool = True,
    default: int | None = None,
) -> int | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return default
    return parse_port(value, join_path(path, key))


def parse_network(value: Any, path: str) -> str:
    """A network written in CIDR notation (prefix length required)."""
    text = parse_string(value, path)
    if '/' not in text:
        raise ValidationError(f'{text!r} must be a network in CIDR notation', path)
    try:
        ipaddress.ip_network(text, strict=False)
    except ValueError:
        raise ValidationError(f'{text!r} is not a valid IP network', path) from None
    return text


def parse_address(value: Any, path: str) -> str:
    """A single IP address; a prefix length is not allowed."""
    text = parse_string(value, path)
    try:
        ipaddress.ip_address(text)
    except ValueError:
        raise ValidationError(f'{text!r} is not a valid IP address', path) from None
    return text


def parse_address_or_network(value: Any, path: str) -> str:
    """An IP address or a CIDR network."""
    text = parse_string(value, path)
    if '/' in text:
        return parse_network(text, path)
    return parse_address(text, path)


def get_network(data: dict, key: str, path: str = '', *, required: bool = True) -> str | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return None
    return parse_network(value, join_path(path, key))


def get_address(data: dict, key: str, path: str = '', *, required: bool = True) -> str | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return None
    return parse_address(value, join_path(path, key))


def get_address_or_network(
    data: dict, key: str, path: str = '', *, required: bool = True
) -> str | None:
    value = _lookup(data, key, path, required)
    if value is _MISSING:
        return None
    return parse_address_or_network(value, join_path(path, key))


def get_connection_url(data: dict, key: str, path: str = '') -> str:
    """A PostgreSQL connection URL, normalised for SQLAlchemy.

    ``postgres://`` is accepted like in libpq.  A URL without a driver
    suffix gets ``postgresql+psycopg``; an explicit driver
    (``postgresql+psycopg2``) is kept.
    """
    field_path = join_path(path, key)
    text = get_string(data, key, path)
    try:
        url = sqlalchemy.engine.make_url(text)
    except sqlalchemy.exc.ArgumentError:
        raise ValidationError(f'{text!r} is not a valid connection URL', field_path) from None
    backend, _, driver = url.drivername.partition('+')
    if backend not in POSTGRES_BACKENDS:
        raise ValidationError(
            f'connection URL scheme must be postgres, got {url.drivername!r}', field_path
        )
    url = url.set(drivername=f'postgresql+{driver or POSTGRES_DEFAULT_DRIVER}')
    return url.render_as_string(hide_password=False)


@dataclasses.dataclass(frozen=True, slots=True)
class NetworkEntry:
    """A CIDR network with an optional human description."""

    value: str
    description: str = ''

    @classmethod
    def from_value(cls, item: Any, path: str) -> NetworkEntry:
        """Read ``{value, description?}``; a bare CIDR string is accepted too."""
        if isinstance(item, cls):
            return item
        if isinstance(item, str):
            return cls(value=parse_network(item, path))
        item = require_mapping(item, path)
        return cls(
            value=get_network(item, 'value', path),
            description=get_string(item, 'description', path, required=False, default=''),
        )


def parse_network_entries(items: list | None, path: str) -> tuple[NetworkEntry, ...]:
    if not items:
        return ()
    return tuple(NetworkEntry.from_value(item, join_path(path, i)) for i, item in enumerate(items))
