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

"""YAML configuration file reader.

The file groups job configurations by host configuration id::

    version: '1'
    fileVersion: '1'
    global:
      network:
        trustedItems:
          - value: 10.0.0.0/8
    configurations:
      - id: host-a
        jobs:
          - name: prepare-netfilter
            configuration: {...}

Only the document structure is checked here.  Each job's
``configuration`` mapping is validated later by the job itself.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import Any

import yaml

from ._errors import ConfigurationError, ValidationError
from ._validation import (
    NetworkEntry,
    get_list,
    get_mapping,
    get_string,
    join_path,
    parse_network_entries,
    require_mapping,
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class JobEntry:
    name: str
    configuration: dict


@dataclasses.dataclass(frozen=True, slots=True)
class ConfigurationItem:
    id: str
    jobs: tuple[JobEntry, ...]


@dataclasses.dataclass(frozen=True, slots=True)
class Configuration:
    """Validated top-level structure of a configuration file."""

    version: str
    file_version: str
    global_trusted_items: tuple[NetworkEntry, ...]
    configurations: tuple[ConfigurationItem, ...]

    @classmethod
    def from_dict(cls, data: Any) -> Configuration:
        data = require_mapping(data, '')
        global_settings = get_mapping(data, 'global', required=False) or {}
        global_network = get_mapping(global_settings, 'network', 'global', required=False) or {}
        trusted = get_list(global_network, 'trustedItems', 'global.network', required=False)

        configurations = []
        for i, raw_item in enumerate(get_list(data, 'configurations')):
            item_path = join_path('configurations', i)
            raw_item = require_mapping(raw_item, item_path)
            jobs = []
            for j, raw_job in enumerate(get_list(raw_item, 'jobs', item_path)):
                job_path = join_path(join_path(item_path, 'jobs'), j)
                raw_job = require_mapping(raw_job, job_path)
                jobs.append(
                    JobEntry(
                        name=get_string(raw_job, 'name', job_path),
                        configuration=get_mapping(raw_job, 'configuration', job_path),
                    )
                )
            configurations.append(
                ConfigurationItem(id=get_string(raw_item, 'id', item_path), jobs=tuple(jobs))
            )

        return cls(
            version=_get_version(data, 'version'),
            file_version=_get_version(data, 'fileVersion'),
            global_trusted_items=parse_network_entries(trusted, 'global.network.trustedItems'),
            configurations=tuple(configurations),
        )

    def find_job(self, configuration_id: str, job_name: str) -> JobEntry:
        """Return the job entry *job_name* of configuration *configuration_id*."""
        for item in self.configurations:
            if item.id == configuration_id:
                break
        else:
            raise ConfigurationError(f'Cannot find the configuration id {configuration_id}')

        for job in item.jobs:
            if job.name == job_name:
                return job
        raise ConfigurationError(
            f'Cannot find the job {job_name} in configuration {configuration_id}'
        )


def _get_version(data: dict, key: str) -> str:
    # YAML reads an unquoted 1 or 1.0 as a number
    value = data.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return get_string(data, key)


def load_configuration(path: str | pathlib.Path) -> Configuration:
    """Read and validate the YAML configuration file at *path*."""
    path = pathlib.Path(path)
    logger.debug('Loading configuration from %s', path)
    with path.open(encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f'{path} is not valid YAML: {e}') from e
        except UnicodeDecodeError as e:
            raise ValidationError(f'{path} is not UTF-8 encoded: {e}') from e
    return Configuration.from_dict(data)
