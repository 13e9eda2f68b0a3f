#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import datetime
import logging
import re

import attr

from container_layerid.config import CanonicalMixin
from container_layerid.config import OMIT_EMPTY
from container_layerid.config import OMIT_NONE
from container_layerid.config import RuntimeConfig
from container_layerid.config import ToDictMixin
from container_layerid.config import to_record
from container_layerid.utils import load_json

TRACE = False
logger = logging.getLogger(__name__)
if TRACE:
    import sys
    logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)
    logger.setLevel(logging.DEBUG)

"""
Legacy "v1" layer metadata as found in the "json" file of each layer directory
of a Docker image saved in the v1.0 format:
https://github.com/moby/moby/blob/master/image/spec/v1.md

For example:
{
    "id": "a9561eb1b190625c9adb5a9513e72c4dedafc1cb2d4c5236c9a6957ec7dfd5a9",
    "parent": "c6e3cedcda2e3982a1a6760e178355e8e65f7b80e4e5248743fa3549d284e024",
    "created": "2014-10-13T21:19:18.674353812Z",
    "container": "5d8e4c6d43d9a4b8d2b0a5ee1c0d0d2e38f2e7a4c8a5d2b6f2a4e5c3e7d3f8a1",
    "container_config": {"Cmd": ["/bin/sh", "-c", "#(nop) ADD file:..."], ...},
    "docker_version": "1.3.0",
    "author": "Alyssa P. Hacker <alyspdev@example.com>",
    "config": {"Cmd": ["/bin/bash"], ...},
    "architecture": "amd64",
    "os": "linux",
    "Size": 271828
}
"""

RFC3339_TIMESTAMP = re.compile(
    r'^(?P<base>[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2})'
    r'(?:\.(?P<fraction>[0-9]+))?'
    r'(?P<offset>Z|[+-](?P<offset_hours>[0-9]{2}):(?P<offset_minutes>[0-9]{2}))$'
)


def canonical_timestamp(value):
    """
    Return a canonical RFC 3339 timestamp string from a `value` RFC 3339
    timestamp string or datetime, or None if `value` is None. Raise a
    ValueError if `value` cannot be parsed.

    Fractional seconds are truncated to nanoseconds and trailing zeros are
    removed. A zero UTC offset is written as "Z". A naive datetime is
    considered to be in UTC.

    For example::
    >>> canonical_timestamp('2014-10-13T21:19:18.674353810+00:00')
    '2014-10-13T21:19:18.67435381Z'
    >>> canonical_timestamp('2014-10-13T21:19:18.000-05:00')
    '2014-10-13T21:19:18-05:00'
    >>> canonical_timestamp(datetime.datetime(2014, 10, 13, 21, 19, 18, 500000))
    '2014-10-13T21:19:18.5Z'
    """
    if value is None:
        return None

    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        value = value.isoformat(timespec='microseconds')

    if not isinstance(value, str):
        raise ValueError(f'Not a timestamp: {value!r}')

    match = RFC3339_TIMESTAMP.fullmatch(value)
    if not match:
        raise ValueError(f'Invalid RFC 3339 timestamp: {value!r}')

    base = match.group('base')
    try:
        datetime.datetime.strptime(base, '%Y-%m-%dT%H:%M:%S')
    except ValueError as e:
        raise ValueError(f'Invalid RFC 3339 timestamp: {value!r}: {e}') from e

    offset = match.group('offset')
    if offset != 'Z':
        if int(match.group('offset_hours')) > 23 or int(match.group('offset_minutes')) > 59:
            raise ValueError(f'Invalid RFC 3339 timestamp offset: {value!r}')

    fraction = (match.group('fraction') or '')[:9].rstrip('0')
    if offset in ('+00:00', '-00:00'):
        offset = 'Z'

    if fraction:
        return f'{base}.{fraction}{offset}'
    return f'{base}{offset}'


@attr.attributes
class LayerMetadata(CanonicalMixin):
    """
    The metadata of one layer of a container image in the legacy "v1" format.
    """

    id = attr.attrib(
        default='',
        metadata=dict(key='id', omit=OMIT_EMPTY, doc=
            'Id for this layer. It is cleared before computing a layer id and '
            'never contributes to it.'
        )
    )

    parent = attr.attrib(
        default='',
        metadata=dict(key='parent', omit=OMIT_EMPTY, doc=
            'Id of the parent layer. Empty for a root layer.')
    )

    comment = attr.attrib(
        default='',
        metadata=dict(key='comment', omit=OMIT_EMPTY, doc='A comment for this layer.')
    )

    created = attr.attrib(
        default=None,
        metadata=dict(key='created', serializer=canonical_timestamp, doc=
            'RFC 3339 timestamp string or datetime for when this layer was '
            'created. Serialized as null when not set.'
        )
    )

    container = attr.attrib(
        default='',
        metadata=dict(key='container', omit=OMIT_EMPTY, doc=
            'Id of the transient container used to create this layer.')
    )

    container_config = attr.attrib(
        default=attr.Factory(RuntimeConfig),
        converter=to_record(RuntimeConfig, default=RuntimeConfig),
        metadata=dict(key='container_config', doc=
            'RuntimeConfig of the container used to create this layer.')
    )

    docker_version = attr.attrib(
        default='',
        metadata=dict(key='docker_version', omit=OMIT_EMPTY, doc=
            'Version of the tool used to build this layer.')
    )

    author = attr.attrib(
        default='',
        metadata=dict(key='author', omit=OMIT_EMPTY, doc='Author when present.')
    )

    config = attr.attrib(
        default=None,
        converter=to_record(RuntimeConfig),
        metadata=dict(key='config', omit=OMIT_NONE, doc=
            'RuntimeConfig to use when running a container from an image '
            'built from this layer.'
        )
    )

    architecture = attr.attrib(
        default='',
        metadata=dict(key='architecture', omit=OMIT_EMPTY, doc='Architecture.')
    )

    variant = attr.attrib(
        default='',
        metadata=dict(key='variant', omit=OMIT_EMPTY, doc='Architecture variant.')
    )

    os = attr.attrib(
        default='',
        metadata=dict(key='os', omit=OMIT_EMPTY, doc='Operating system.')
    )

    size = attr.attrib(
        default=0,
        metadata=dict(key='Size', omit=OMIT_EMPTY, doc=
            'Size in bytes of this layer content when declared.')
    )

    @classmethod
    def from_file(cls, location):
        """
        Return a LayerMetadata loaded from the legacy layer JSON file at
        `location`.
        """
        if TRACE:
            logger.debug(f'LayerMetadata.from_file: {location}')
        return cls.from_data(load_json(location))


@attr.attributes
class History(ToDictMixin):
    """
    A history entry of an image config, as derived from a legacy layer.
    """

    author = attr.attrib(
        default=None,
        metadata=dict(doc='Author of this layer.')
    )

    created = attr.attrib(
        default=None,
        metadata=dict(doc='Date/timestamp for when this layer was created.')
    )

    created_by = attr.attrib(
        default=None,
        metadata=dict(doc='Command used to create this layer.')
    )

    comment = attr.attrib(
        default=None,
        metadata=dict(doc='A comment for this layer.')
    )

    empty_layer = attr.attrib(
        default=False,
        metadata=dict(doc=
            'True for empty, no-op layers with no rootfs content.'
        )
    )


def history_from_metadata(metadata, empty_layer=False):
    """
    Return a History built from a `metadata` LayerMetadata. The command used
    to create the layer is the container config command joined with spaces.
    """
    cmd = metadata.container_config.cmd or ()
    return History(
        author=metadata.author,
        created=metadata.created,
        created_by=' '.join(cmd),
        comment=metadata.comment,
        empty_layer=empty_layer,
    )
