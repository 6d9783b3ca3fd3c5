#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

CommonCode.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Common code for the r2epub command line program and the r2epub service.

"""

import configparser

from libgutenberg.CommonOptions import Options

class Struct(object):
    pass

options = Options()


class R2EpubError(Exception):
    """ Base class of all conversion errors. """


class InvalidSourceUrl(R2EpubError):
    """ The url is malformed, not http(s), or uses an unsafe port. """


class ResourceUnreachable(R2EpubError):
    """ A fetch or a media type lookup failed. """


class MissingDocumentConfig(R2EpubError):
    """ The document carries no ReSpec configuration. """


class UnknownSpecStatus(R2EpubError):
    """ The specStatus is in none of the known status tables. """


class SchemaValidationFailure(R2EpubError):
    """ The collection configuration is malformed.

    `errors` holds every problem found, not just the first one.

    """

    def __init__(self, errors):
        self.errors = list(errors)
        R2EpubError.__init__(self, 'Invalid collection configuration:\n  ' +
                             '\n  '.join(self.errors))


class ContainerFinalizationFailure(R2EpubError):
    """ The EPUB container could not be written. """


def add_common_options(ap, user_config_file):
    """ Add options common to all programs. """

    ap.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="be verbose (-v -v be more verbose)")

    ap.add_argument(
        "--config",
        metavar="CONFIG_FILE",
        dest="config_file",
        default=user_config_file,
        help="read config file (default: %(default)s)")


def set_arg_defaults(ap, config_file):
    # get default command-line args
    cp = configparser.ConfigParser()
    cp.read(config_file)
    if cp.has_section('DEFAULT_ARGS'):
        ap.set_defaults(**dict(cp.items('DEFAULT_ARGS')))


def parse_config_and_args(ap, sys_config, defaults=None, args=None):
    """ Put command-line args and config file sections into options. """

    options.update(vars(ap.parse_args(args)))

    cp = configparser.ConfigParser()
    cp.read((sys_config, options.config_file))

    options.config = Struct()

    for name, value in (defaults or {}).items():
        setattr(options.config, name.upper(), value)

    for section in cp.sections():
        if section == 'DEFAULT_ARGS':
            continue
        for name, value in cp.items(section):
            setattr(options.config, name.upper(), value)

    return options
