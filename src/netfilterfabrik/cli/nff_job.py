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

"""CLI entry point compiling one job of a configuration file."""

import argparse
import logging
import sys

import netfilterfabrik
from netfilterfabrik.cli import setup_logging
from netfilterfabrik.core import Direction, NetfilterFabrikError, load_configuration
from netfilterfabrik.driver import format_transcript, render_script, write_script
from netfilterfabrik.jobs import compile_job, default_job_directory

__author__ = 'Linuxfabrik GmbH, Zurich/Switzerland'

DESCRIPTION = """NetfilterFabrik job compiler. Loads a configuration file and compiles the
iptables/ipset commands installing or uninstalling one job of one configuration."""

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='nff-job',
        description=DESCRIPTION,
    )

    parser.add_argument(
        '-c',
        '--config-file',
        required=True,
        dest='CONFIG_FILE',
        help='path to the YAML configuration file',
    )

    parser.add_argument(
        '-i',
        '--id',
        required=True,
        dest='CONFIGURATION_ID',
        help='the configuration id to use',
    )

    parser.add_argument(
        '-j',
        '--job',
        required=True,
        dest='JOB',
        help='the job to compile',
    )

    parser.add_argument(
        '-a',
        '--action',
        required=True,
        choices=[d.value for d in Direction],
        dest='ACTION',
        help='action to compile',
    )

    parser.add_argument(
        '-p',
        '--print',
        action='store_true',
        dest='PRINT',
        help='print the compiled commands',
    )

    parser.add_argument(
        '-o',
        '--output',
        default='',
        dest='OUTPUT',
        help='write the compiled commands as a shell script to this file',
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

    directory = default_job_directory()
    try:
        configuration = load_configuration(args.CONFIG_FILE)
        job_entry = configuration.find_job(args.CONFIGURATION_ID, args.JOB)
        transcript = compile_job(
            job_entry.name,
            args.ACTION,
            job_entry.configuration,
            global_trusted_items=list(configuration.global_trusted_items),
            directory=directory,
        )
    except OSError as e:
        print(f'Error: cannot read {args.CONFIG_FILE}: {e}', file=sys.stderr)
        return 1
    except NetfilterFabrikError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    logger.debug("Execution of '%s' done", args.JOB)

    if args.PRINT:
        sys.stdout.write(format_transcript(transcript))

    if args.OUTPUT:
        script = render_script(transcript, args.JOB, Direction.parse(args.ACTION))
        try:
            path = write_script(args.OUTPUT, script)
        except OSError as e:
            print(f'Error: cannot write {args.OUTPUT}: {e}', file=sys.stderr)
            return 1
        print(f'Script written to {path}', file=sys.stderr)

    return 0


if __name__ == '__main__':
    sys.exit(main())
