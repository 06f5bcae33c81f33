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

"""Workflow runner executing the steps of a job.

A job is a stateless object exposing a validation step and a list of
generator steps for a direction.  :class:`Workflow` runs them strictly in
order for one execution:

    VALIDATING -> GENERATING (one step after the other) -> COMPLETED
                                                        \\-> FAILED

The first exception raised by a step stops the workflow and is re-raised
unchanged.  Nothing is returned on failure, so callers never see a
partial transcript.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from netfilterfabrik.core import Commands, Direction, Transcript

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ExecutionContext:
    """Everything one execution reads and writes.

    ``job_configuration`` is the raw mapping given by the caller;
    the validation step stores its typed view in ``configuration``.
    Generator steps append to ``commands``.
    """

    direction: Direction
    job_configuration: Any
    global_trusted_items: list = dataclasses.field(default_factory=list)
    configuration: Any = None
    commands: Commands = dataclasses.field(default_factory=Commands)


@dataclasses.dataclass(frozen=True, slots=True)
class Step:
    name: str
    run: Callable[[ExecutionContext], None]


class Job(Protocol):
    """Interface shared by all jobs.

    ``validate`` must not emit commands.  ``steps`` returns the generator
    steps for *direction*; every generator appends to both the install
    and the uninstall transcript.
    """

    name: str

    def validate(self, context: ExecutionContext) -> None: ...

    def steps(self, direction: Direction) -> list[Step]: ...


class WorkflowState(StrEnum):
    PENDING = 'pending'
    VALIDATING = 'validating'
    GENERATING = 'generating'
    COMPLETED = 'completed'
    FAILED = 'failed'


class Workflow:
    """Run one execution of *job* in *direction*.

    The direction is parsed on construction, so an unknown token raises
    :class:`~netfilterfabrik.core.InvalidDirectionError` before any step
    runs.  After :meth:`run` the execution context stays available in
    :attr:`context` for inspection.
    """

    def __init__(self, job: Job, direction: Direction | str) -> None:
        self.job = job
        self.direction: Direction = Direction.parse(direction)
        self.state: WorkflowState = WorkflowState.PENDING
        self.step_index: int = -1
        self.context: ExecutionContext | None = None

    def steps(self) -> list[Step]:
        return [Step('validateConfiguration', self.job.validate), *self.job.steps(self.direction)]

    def run(self, job_configuration: Any, global_trusted_items: list | None = None) -> Transcript:
        self.context = ExecutionContext(
            direction=self.direction,
            job_configuration=job_configuration,
            global_trusted_items=list(global_trusted_items or []),
        )

        for index, step in enumerate(self.steps()):
            self.step_index = index
            self.state = WorkflowState.VALIDATING if index == 0 else WorkflowState.GENERATING
            logger.debug('%s: %s step %d (%s)', self.job.name, self.state, index, step.name)
            try:
                step.run(self.context)
            except Exception as e:
                self.state = WorkflowState.FAILED
                logger.error(
                    'Error while executing the workflow of %s at step %s: %s',
                    self.job.name,
                    step.name,
                    e,
                )
                raise

        self.state = WorkflowState.COMPLETED
        if self.direction is Direction.INSTALL:
            transcript = self.context.commands.install
        else:
            transcript = self.context.commands.uninstall
        logger.info('%s: %s produced %d commands', self.job.name, self.direction, len(transcript))
        return list(transcript)
