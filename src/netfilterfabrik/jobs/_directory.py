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

"""Registry of jobs by name and the single-call compile entry point."""

from __future__ import annotations

import logging
from typing import Any

from netfilterfabrik.core import Direction, JobNotFoundError, Transcript

from ._docker_dns_service import DockerDnsServiceJob
from ._generic_service import GenericServiceJob
from ._prepare_netfilter import PrepareNetfilterJob
from ._sync_blacklist_ips import SyncBlacklistIpsJob
from ._workflow import Job, Workflow

logger = logging.getLogger(__name__)


class JobDirectory:
    """Closed mapping of job names to job instances."""

    def __init__(self, jobs: list[Job] | None = None) -> None:
        self._jobs: dict[str, Job] = {}
        for job in jobs or []:
            self.register(job)

    def register(self, job: Job, name: str | None = None) -> None:
        self._jobs[name or job.name] = job

    def get(self, name: str) -> Job:
        try:
            return self._jobs[name]
        except KeyError:
            raise JobNotFoundError(f'Job {name} not found') from None

    def names(self) -> list[str]:
        return sorted(self._jobs)

    def __contains__(self, name: object) -> bool:
        return name in self._jobs


def default_job_directory() -> JobDirectory:
    """Directory with all built-in jobs under their configuration names."""
    return JobDirectory(
        [
            PrepareNetfilterJob(),
            SyncBlacklistIpsJob(),
            DockerDnsServiceJob(),
            GenericServiceJob(),
        ]
    )


def compile_job(
    job_name: str,
    direction: Direction | str,
    job_configuration: Any,
    global_trusted_items: list | None = None,
    directory: JobDirectory | None = None,
) -> Transcript:
    """Compile *job_name* for *direction* and return its transcript.

    Raises :class:`~netfilterfabrik.core.JobNotFoundError`,
    :class:`~netfilterfabrik.core.InvalidDirectionError`,
    :class:`~netfilterfabrik.core.ValidationError` or
    :class:`~netfilterfabrik.core.DataSourceError`, unchanged.
    """
    if directory is None:
        directory = default_job_directory()
    job = directory.get(job_name)
    logger.debug("Job '%s' found", job_name)
    return Workflow(job, direction).run(job_configuration, global_trusted_items)
