#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

R2Epub.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

r2epub command line tool.

"""

import argparse
import asyncio
import configparser
import datetime
import logging
import os
import sys

from libgutenberg.Logger import debug, error, info, critical
from libgutenberg import Logger

from r2epub import CommonCode, convert
from r2epub.CommonCode import R2EpubError
from r2epub.Config import ConversionOptions, get_respec_options
from r2epub.Fetcher import Fetcher
from r2epub.Version import VERSION
from r2epub.writers.OCFWriter import PACKAGE

CONFIG_FILES = ['/etc/r2epub.conf', os.path.expanduser('~/.r2epub')]

options = CommonCode.options


def add_local_options(ap):
    """ Add local options to commandline. """

    ap.add_argument(
        '--version',
        action='version',
        version="%%(prog)s %s" % VERSION
    )

    ap.add_argument(
        "-r", "--respec",
        dest="respec",
        action="store_true",
        help="the source must be pre-processed by the ReSpec spec generator")

    ap.add_argument(
        "-d", "--publishDate",
        dest="publish_date",
        metavar="DATE",
        default=None,
        help="publication date (YYYY-MM-DD), passed to the spec generator")

    ap.add_argument(
        "-s", "--specStatus",
        dest="spec_status",
        metavar="STATUS",
        default=None,
        help="specification status, passed to the spec generator")

    ap.add_argument(
        "-l", "--addSectionLinks",
        dest="add_section_links",
        metavar="BOOL",
        choices=['true', 'false'],
        default=None,
        help="add section links, passed to the spec generator")

    ap.add_argument(
        "-m", "--maxTocLevel",
        dest="max_toc_level",
        metavar="LEVEL",
        type=int,
        default=None,
        help="maximum table of contents level, passed to the spec generator")

    ap.add_argument(
        "-p", "--package",
        dest="print_package",
        action="store_true",
        help="print the package document instead of writing the epub")

    ap.add_argument(
        "-t", "--trace",
        dest="trace",
        action="store_true",
        help="print debug information (same as -v)")

    ap.add_argument(
        "--output-dir",
        metavar="OUTPUT_DIR",
        dest="outputdir",
        default="./",
        help="output directory (default: ./)")

    ap.add_argument(
        "url",
        metavar="URL",
        help="url of the ReSpec document or the collection configuration")


def config(args=None):
    """ Process config files and commandline params. """

    ap = argparse.ArgumentParser(prog='r2epub')
    CommonCode.add_common_options(ap, CONFIG_FILES[1])
    add_local_options(ap)
    CommonCode.set_arg_defaults(ap, CONFIG_FILES[1])

    CommonCode.parse_config_and_args(
        ap,
        CONFIG_FILES[0],
        {
            'proxies': None,
            'user_agent': None,
            'timeout': None,
        },
        args
    )

    if options.trace:
        options.verbose = max(options.verbose, 1)


def conversion_options():
    """ Build the conversion options from the command line. """

    respec_options = get_respec_options(
        publishDate=options.publish_date,
        specStatus=options.spec_status,
        addSectionLinks=options.add_section_links,
        maxTocLevel=options.max_toc_level)
    # asking for any spec generator option implies the spec generator
    return ConversionOptions(options.respec or bool(respec_options), respec_options)


async def run():
    """ Convert and write the result. """

    fetcher = Fetcher.from_config(options.config)
    ocf = await convert(options.url, conversion_options(), fetcher)

    if options.print_package:
        print(ocf.get_entry(PACKAGE).decode('utf-8'))
        return

    content = await ocf.get_content()
    filename = os.path.join(options.outputdir, ocf.name)
    os.makedirs(options.outputdir, exist_ok=True)
    with open(filename, 'wb') as fp:
        fp.write(content)
    info('Wrote %s' % filename)


def main(args=None):
    """ Main program. """

    Logger.setup(Logger.LOGFORMAT, loglevel=logging.INFO)

    try:
        config(args)
    except configparser.Error as what:
        error("Error in configuration file: %s", str(what))
        return 1

    Logger.set_log_level(options.verbose)

    start_time = datetime.datetime.now()
    try:
        asyncio.run(run())
    except R2EpubError as what:
        critical('Conversion of %s failed: %s' % (options.url, what))
        return 1
    except OSError as what:
        critical('Cannot write output: %s' % what)
        return 1

    end_time = datetime.datetime.now()
    debug('Total time: %s' % (end_time - start_time))
    return 0


if __name__ == "__main__":
    sys.exit(main())
