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

"""Jobs compiling policy into iptables/ipset transcripts."""

from ._directory import JobDirectory, compile_job, default_job_directory
from ._docker_dns_service import DockerDnsServiceJob
from ._generic_service import GenericServiceJob
from ._netfilter import (
    BLOCK_ACCESS_CHAIN,
    BLOCK_SET,
    SERVICES_ACCESS_CHAIN,
    TRUSTED_ACCESS_CHAIN,
    TRUSTED_SET,
    VITAL_ACCESS_CHAIN,
)
from ._prepare_netfilter import PrepareNetfilterJob
from ._schemas import (
    DnsForwardItem,
    DockerDnsServiceConfig,
    GenericServiceConfig,
    PrepareNetfilterConfig,
    PrimaryInterface,
    ServiceItem,
    SyncBlacklistConfig,
)
from ._sync_blacklist_ips import SyncBlacklistIpsJob
from ._workflow import ExecutionContext, Job, Step, Workflow, WorkflowState

__all__ = [
    'BLOCK_ACCESS_CHAIN',
    'BLOCK_SET',
    'SERVICES_ACCESS_CHAIN',
    'TRUSTED_ACCESS_CHAIN',
    'TRUSTED_SET',
    'VITAL_ACCESS_CHAIN',
    'DnsForwardItem',
    'DockerDnsServiceConfig',
    'DockerDnsServiceJob',
    'ExecutionContext',
    'GenericServiceConfig',
    'GenericServiceJob',
    'Job',
    'JobDirectory',
    'PrepareNetfilterConfig',
    'PrepareNetfilterJob',
    'PrimaryInterface',
    'ServiceItem',
    'Step',
    'SyncBlacklistConfig',
    'SyncBlacklistIpsJob',
    'Workflow',
    'WorkflowState',
    'compile_job',
    'default_job_directory',
]
