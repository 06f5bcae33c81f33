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

"""Turn a transcript into shell command lines or a complete script.

Nothing here runs the commands; the generated script is meant to be
reviewed and executed by the operator or a deployment tool.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import time
from pathlib import Path

import jinja2

from netfilterfabrik import __version__
from netfilterfabrik.core import Command, CommandKind, Direction, Transcript

SEPARATOR = '--------------------'
SCRIPT_TEMPLATE = 'apply_script.sh.j2'


@dataclasses.dataclass
class ToolPaths:
    """Executables used for each command kind."""

    iptables: str = 'iptables'
    ipset: str = 'ipset'

    def tool_for(self, kind: CommandKind) -> str:
        if kind is CommandKind.IPTABLES4:
            return self.iptables
        return self.ipset


def command_line(command: Command, tool_paths: ToolPaths | None = None) -> str:
    tool_paths = tool_paths or ToolPaths()
    return f'{tool_paths.tool_for(command.kind)} {command.arguments}'


def format_transcript(transcript: Transcript, tool_paths: ToolPaths | None = None) -> str:
    """Transcript framed by separator lines, one command line each."""
    lines = [SEPARATOR, SEPARATOR]
    lines += [command_line(c, tool_paths) for c in transcript]
    lines += [SEPARATOR, SEPARATOR]
    return '\n'.join(lines) + '\n'


def template_search_path(platform: str, user_dir: Path | None = None) -> list[Path]:
    """Directories searched for *platform* templates, user overrides first.

    The override directory defaults to ``~/netfilterfabrik/templates/<platform>``
    and is only searched when it exists.
    """
    if user_dir is None:
        user_dir = Path.home() / 'netfilterfabrik' / 'templates' / platform
    package_dir = Path(str(importlib.resources.files('netfilterfabrik') / 'resources' / 'templates' / platform))
    if user_dir.is_dir():
        return [user_dir, package_dir]
    return [package_dir]


def _load_template(platform: str, user_dir: Path | None) -> jinja2.Template:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(template_search_path(platform, user_dir)),
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return env.get_template(SCRIPT_TEMPLATE)


def render_script(
    transcript: Transcript,
    job_name: str,
    direction: Direction,
    tool_paths: ToolPaths | None = None,
    platform: str = 'linux',
    user_dir: Path | None = None,
) -> str:
    template = _load_template(platform, user_dir)
    return template.render(
        {
            'version': __version__,
            'job_name': job_name,
            'direction': str(direction),
            'timestamp': time.strftime('%c'),
            'user': os.environ.get('USER', 'unknown'),
            'command_lines': [command_line(c, tool_paths) for c in transcript],
        }
    )


def write_script(path: str | Path, script: str) -> Path:
    """Write *script* to *path* with mode 0740 (owner may execute)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(script, encoding='utf-8')
    path.chmod(0o740)
    return path
