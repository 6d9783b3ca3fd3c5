#!/usr/bin/env python
#  -*- mode: python; indent-tabs-mode: nil; -*- coding: UTF8 -*-

"""

Config.py

Copyright 2020-2021 by the r2epub authors

Distributable under the GNU General Public License Version 3 or newer.

Typed configuration structures.

The ReSpec configuration embedded in a document and the JSON description
of a collection are turned into these models once, where they enter the
program. Everything downstream trusts them.

"""

from typing import List, Optional

from pydantic import (
    BaseModel, ConfigDict, Field, NonNegativeInt, StrictBool, ValidationError, field_validator)

from r2epub.CommonCode import MissingDocumentConfig, SchemaValidationFailure

RE_DATE = r'^\d{4}-\d{2}-\d{2}$'
RE_NAME = r'^[-\w.]+$'


def validation_errors(what):
    """ Flatten a pydantic ValidationError into "location: message" strings. """
    return ['%s: %s' % ('.'.join(str(loc) for loc in error['loc']) or 'configuration',
                        error['msg'])
            for error in what.errors()]


class Editor(BaseModel):
    """ One editor as listed in the ReSpec configuration. """

    model_config = ConfigDict(extra='ignore')

    name: str
    company: Optional[str] = None

    def __str__(self):
        if self.company:
            return '%s, %s' % (self.name, self.company)
        return self.name


class RespecConfig(BaseModel):
    """ The subset of the ReSpec user configuration r2epub relies on. """

    # ReSpec configurations carry lots of keys we do not care about
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    short_name: str = Field(alias='shortName', min_length=1)
    spec_status: str = Field(default='base', alias='specStatus')
    editors: List[Editor] = Field(default_factory=list)
    publish_date: Optional[str] = Field(default=None, alias='publishDate')
    max_toc_level: Optional[int] = Field(default=None, alias='maxTocLevel')

    @field_validator('spec_status', mode='before')
    @classmethod
    def default_status(cls, value):
        return value or 'base'

    @field_validator('editors', mode='before')
    @classmethod
    def named_editors(cls, value):
        """ Editors without a name are dropped. """
        if not isinstance(value, list):
            return []
        return [entry for entry in value if isinstance(entry, dict) and entry.get('name')]

    @field_validator('publish_date', mode='before')
    @classmethod
    def date_string(cls, value):
        return value if isinstance(value, str) else None

    @field_validator('max_toc_level', mode='before')
    @classmethod
    def toc_level(cls, value):
        try:
            return int(value) or None
        except (TypeError, ValueError):
            return None

    @classmethod
    def from_dict(cls, data):
        """ Build from the parsed `initialUserConfig` json. """

        if not isinstance(data, dict):
            raise MissingDocumentConfig('User config is not a json object')
        try:
            return cls.model_validate(data)
        except ValidationError as what:
            raise MissingDocumentConfig('User config is not usable: %s' %
                                        '; '.join(validation_errors(what)))

    @property
    def creators(self):
        """ Editors as creator strings ("name, company"). """
        return [str(editor) for editor in self.editors]


class RespecOptions(BaseModel):
    """ Options passed on to the ReSpec spec generator.

    Any of the values may be None, meaning: use what the document says.

    """

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    publish_date: Optional[str] = Field(default=None, alias='publishDate', pattern=RE_DATE)
    spec_status: Optional[str] = Field(default=None, alias='specStatus', min_length=1)
    add_section_links: Optional[bool] = Field(default=None, alias='addSectionLinks')
    max_toc_level: Optional[NonNegativeInt] = Field(default=None, alias='maxTocLevel')

    def items(self):
        """ Yield the (name, value) pairs that are set, as the spec generator wants them. """
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            yield field.alias, str(value)

    def __bool__(self):
        return any(True for dummy in self.items())


def get_respec_options(**kwargs):
    """ Build RespecOptions out of user input. """
    try:
        return RespecOptions(**kwargs)
    except ValidationError as what:
        raise SchemaValidationFailure(validation_errors(what))


class ConversionOptions(object):
    """ Options of one single document conversion. """

    def __init__(self, respec=False, config=None):
        self.respec = respec
        self.config = config or RespecOptions()


class ChapterConfiguration(BaseModel):
    """ One chapter of a collection. """

    model_config = ConfigDict(extra='forbid')

    url: str = Field(min_length=1)
    respec: StrictBool = False
    config: RespecOptions = Field(default_factory=RespecOptions)

    @property
    def options(self):
        return ConversionOptions(self.respec, self.config)


class CollectionConfiguration(BaseModel):
    """ A collection: a title, an output name and an ordered chapter list. """

    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    title: str = Field(min_length=1)
    name: str = Field(pattern=RE_NAME)
    comment: Optional[str] = None
    chapters: List[ChapterConfiguration] = Field(min_length=1)


def get_book_configuration(data):
    """ Validate collection json and build a CollectionConfiguration.

    Every problem is reported, not only the first one.

    """

    try:
        return CollectionConfiguration.model_validate(data)
    except ValidationError as what:
        raise SchemaValidationFailure(validation_errors(what))
