#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import datetime
import logging

import attr

from container_layerid import utils

TRACE = False
logger = logging.getLogger(__name__)
if TRACE:
    import sys
    logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)
    logger.setLevel(logging.DEBUG)

"""
Container runtime configuration objects as found in the "config" and
"container_config" mappings of a legacy Docker layer JSON file.

Each attribute carries in its metadata:
- key: the name of this field in the canonical JSON form,
- omit: one of OMIT_EMPTY (omitted when empty, zero or false) or OMIT_NONE
  (omitted only when unset). Fields without an omit rule are always present
  and unset values are serialized as null,

Fields are declared in their canonical order.
"""

OMIT_EMPTY = 'empty'
OMIT_NONE = 'none'


class StrSlice(tuple):
    """
    An ordered sequence of strings that can be built from either a single
    string or a sequence of strings. A single string is the same as a sequence
    of one string.
    """

    @classmethod
    def from_value(cls, value):
        """
        Return a StrSlice from a `value` string or sequence of strings or None
        if `value` is None.
        """
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls((value,))
        if not isinstance(value, (list, tuple)):
            raise TypeError(f'Not a string or a list of strings: {value!r}')
        for item in value:
            if not isinstance(item, str):
                raise TypeError(f'Not a string: {item!r} in: {value!r}')
        return cls(value)


def to_string_list(value):
    """
    Return a tuple of strings from a `value` list or None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        raise TypeError(f'Expected a list of strings, not a string: {value!r}')
    return tuple(value)


def to_key_set(value):
    """
    Return a frozenset of keys from a `value` mapping, iterable or string or
    None. Mappings such as {"80/tcp": {}} keep only their keys.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return frozenset([value])
    return frozenset(value)


def to_mapping(value):
    if value is None:
        return None
    return dict(value)


def to_nanoseconds(value):
    """
    Return an integer number of nanoseconds from a `value` timedelta or integer.
    """
    if not value:
        return 0
    if isinstance(value, datetime.timedelta):
        return (value // datetime.timedelta(microseconds=1)) * 1000
    return int(value)


def to_record(record_class, default=None):
    """
    Return a converter function that returns a `record_class` object from a
    value that is either a `record_class` object or a mapping loaded with
    `record_class.from_data()`. None is converted to the result of calling
    `default` or to None if there is no `default`.
    """

    def converter(value):
        if value is None:
            return default() if default else None
        if isinstance(value, record_class):
            return value
        if isinstance(value, dict):
            return record_class.from_data(value)
        raise TypeError(
            f'Expected a {record_class.__name__} or a mapping, not: {value!r}')

    return converter


def canonical_value(value):
    """
    Return a canonical, JSON-serializable version of a `value`. Sets become
    mappings of {key: {}} and mappings are sorted by key so that neither depend
    on iteration or insertion order.
    """
    if isinstance(value, CanonicalMixin):
        return value.to_canonical()
    if isinstance(value, (set, frozenset)):
        return {key: {} for key in sorted(value)}
    if isinstance(value, dict):
        return dict(sorted(value.items()))
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


class ToDictMixin(object):
    """
    A mixin to add an to_dict() method to an attr-based class.
    """

    def to_dict(self, exclude_fields=()):
        if exclude_fields:
            filt = lambda attr, value: attr.name not in exclude_fields
        else:
            filt = lambda attr, value: True
        return attr.asdict(self, filter=filt)


class CanonicalMixin(ToDictMixin):
    """
    A mixin for attr-based classes with canonical field metadata.
    """

    def to_canonical(self):
        """
        Return an ordered mapping of {canonical key: value} for this object in
        declared field order, skipping omitted fields.
        """
        canonical = {}
        for field in attr.fields(type(self)):
            value = getattr(self, field.name)
            omit = field.metadata.get('omit')
            if omit == OMIT_EMPTY and not value:
                continue
            if omit == OMIT_NONE and value is None:
                continue

            serializer = field.metadata.get('serializer')
            if serializer:
                value = serializer(value)
            else:
                value = canonical_value(value)
            canonical[field.metadata['key']] = value
        return canonical

    @classmethod
    def from_data(cls, data):
        """
        Return a new object built from a `data` mapping such as loaded from
        JSON. Keys are matched case-insensitively and unknown keys are ignored.
        """
        data = utils.lower_keys(data or {}, recursive=False)
        kwargs = {}
        for field in attr.fields(cls):
            key = field.metadata['key'].lower()
            if key not in data:
                continue
            kwargs[field.name] = data[key]
        return cls(**kwargs)


@attr.attributes
class HealthConfig(CanonicalMixin):
    """
    A container healthcheck. Durations are integer nanoseconds.
    """

    test = attr.attrib(
        default=None,
        converter=to_string_list,
        metadata=dict(key='Test', omit=OMIT_EMPTY, doc=
            'Test command to run as a list of strings. Either [] to inherit '
            'the healthcheck, ["NONE"] to disable it, ["CMD", args...] to exec '
            'arguments directly or ["CMD-SHELL", command] to use a shell.'
        )
    )

    interval = attr.attrib(
        default=0,
        converter=to_nanoseconds,
        metadata=dict(key='Interval', omit=OMIT_EMPTY, doc=
            'Time to wait between checks.')
    )

    timeout = attr.attrib(
        default=0,
        converter=to_nanoseconds,
        metadata=dict(key='Timeout', omit=OMIT_EMPTY, doc=
            'Time to wait before considering the check to have hung.')
    )

    start_period = attr.attrib(
        default=0,
        converter=to_nanoseconds,
        metadata=dict(key='StartPeriod', omit=OMIT_EMPTY, doc=
            'Time for the container to initialize before retries count down.')
    )

    start_interval = attr.attrib(
        default=0,
        converter=to_nanoseconds,
        metadata=dict(key='StartInterval', omit=OMIT_EMPTY, doc=
            'Time to wait between checks during the start period.')
    )

    retries = attr.attrib(
        default=0,
        metadata=dict(key='Retries', omit=OMIT_EMPTY, doc=
            'Number of consecutive failures needed to consider a container '
            'unhealthy.')
    )


@attr.attributes
class RuntimeConfig(CanonicalMixin):
    """
    The runtime configuration of a container. Used both for the configuration
    of the container that created a layer and for the configuration to apply
    when running an image built from a layer.
    """

    hostname = attr.attrib(
        default='',
        metadata=dict(key='Hostname', doc='Hostname.')
    )

    domainname = attr.attrib(
        default='',
        metadata=dict(key='Domainname', doc='Domain name.')
    )

    user = attr.attrib(
        default='',
        metadata=dict(key='User', doc='User that runs commands in the container.')
    )

    attach_stdin = attr.attrib(
        default=False,
        metadata=dict(key='AttachStdin', doc='Attach the standard input.')
    )

    attach_stdout = attr.attrib(
        default=False,
        metadata=dict(key='AttachStdout', doc='Attach the standard output.')
    )

    attach_stderr = attr.attrib(
        default=False,
        metadata=dict(key='AttachStderr', doc='Attach the standard error.')
    )

    exposed_ports = attr.attrib(
        default=None,
        converter=to_key_set,
        metadata=dict(key='ExposedPorts', omit=OMIT_EMPTY, doc=
            'Set of exposed ports as "port/protocol" strings such as "80/tcp".')
    )

    tty = attr.attrib(
        default=False,
        metadata=dict(key='Tty', doc='Attach a tty.')
    )

    open_stdin = attr.attrib(
        default=False,
        metadata=dict(key='OpenStdin', doc='Open the standard input.')
    )

    stdin_once = attr.attrib(
        default=False,
        metadata=dict(key='StdinOnce', doc=
            'Close the standard input after the first attached client '
            'disconnects.')
    )

    env = attr.attrib(
        default=None,
        converter=to_string_list,
        metadata=dict(key='Env', doc='List of "VAR=value" environment variables.')
    )

    cmd = attr.attrib(
        default=None,
        converter=StrSlice.from_value,
        metadata=dict(key='Cmd', doc='Command to run as a string or list of strings.')
    )

    healthcheck = attr.attrib(
        default=None,
        converter=to_record(HealthConfig),
        metadata=dict(key='Healthcheck', omit=OMIT_NONE, doc=
            'HealthConfig describing how to check the container is healthy.')
    )

    args_escaped = attr.attrib(
        default=False,
        metadata=dict(key='ArgsEscaped', omit=OMIT_EMPTY, doc=
            'True if the command is already escaped (Windows only).')
    )

    image = attr.attrib(
        default='',
        metadata=dict(key='Image', doc='Name or id of the image of the container.')
    )

    volumes = attr.attrib(
        default=None,
        converter=to_key_set,
        metadata=dict(key='Volumes', doc='Set of volume paths.')
    )

    working_dir = attr.attrib(
        default='',
        metadata=dict(key='WorkingDir', doc='Working directory of commands.')
    )

    entrypoint = attr.attrib(
        default=None,
        converter=StrSlice.from_value,
        metadata=dict(key='Entrypoint', doc=
            'Entrypoint to run as a string or list of strings.')
    )

    network_disabled = attr.attrib(
        default=False,
        metadata=dict(key='NetworkDisabled', omit=OMIT_EMPTY, doc=
            'True if networking is disabled.')
    )

    mac_address = attr.attrib(
        default='',
        metadata=dict(key='MacAddress', omit=OMIT_EMPTY, doc='MAC address.')
    )

    on_build = attr.attrib(
        default=None,
        converter=to_string_list,
        metadata=dict(key='OnBuild', doc=
            'List of ONBUILD triggers defined in the image Dockerfile.')
    )

    labels = attr.attrib(
        default=None,
        converter=to_mapping,
        metadata=dict(key='Labels', doc='Mapping of {label: value} strings.')
    )

    stop_signal = attr.attrib(
        default='',
        metadata=dict(key='StopSignal', omit=OMIT_EMPTY, doc=
            'Signal to stop the container.')
    )

    stop_timeout = attr.attrib(
        default=None,
        metadata=dict(key='StopTimeout', omit=OMIT_NONE, doc=
            'Timeout in seconds to stop the container. Zero is a valid value.')
    )

    shell = attr.attrib(
        default=None,
        converter=StrSlice.from_value,
        metadata=dict(key='Shell', omit=OMIT_EMPTY, doc=
            'Shell for the shell form of RUN, CMD and ENTRYPOINT.')
    )
