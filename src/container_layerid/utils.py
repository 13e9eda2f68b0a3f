#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import hashlib
import json
import logging
import os

from container_layerid import DIGEST_ALGORITHM
from container_layerid import EMPTY_DIGEST

TRACE = False

logger = logging.getLogger(__name__)
if TRACE:
    import sys
    logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)
    logger.setLevel(logging.DEBUG)


def load_json(location):
    """
    Return the data loaded from a JSON file at `location`.
    """
    with open(location) as loc:
        data = json.load(loc)
    return data


def digest_bytes(content):
    """
    Return an algorithm-prefixed digest string such as "sha256:<hex>" for the
    `content` bytes.
    """
    hexdigest = hashlib.new(DIGEST_ALGORITHM, content).hexdigest()
    return f'{DIGEST_ALGORITHM}:{hexdigest}'


def sha256_digest(location):
    """
    Return a SHA256 checksum for the file content at location.
    """
    if location and os.path.exists(location):
        sha256 = hashlib.sha256()
        with open(location, 'rb') as loc:
            for chunk in iter(lambda: loc.read(1024 * 1024), b''):
                sha256.update(chunk)
        return str(sha256.hexdigest())


def file_digest(location):
    """
    Return a "sha256:<hex>" digest for the file at `location` or the digest of
    empty content if there is no file at `location`.
    """
    sha256 = sha256_digest(location)
    if not sha256:
        if TRACE:
            logger.debug(f'file_digest: no file at {location}: using empty digest')
        return EMPTY_DIGEST
    return f'{DIGEST_ALGORITHM}:{sha256}'


def as_bare_id(string):
    """
    Return an id stripped from its leading checksum algorithm prefix if present.
    """
    if not string:
        return string
    if string.startswith('sha256:'):
        _, _, string = string.partition('sha256:')
    return string


def lower_keys(mapping, recursive=True):
    """
    Return a new ``mapping`` modified such that all keys are lowercased strings.
    Fails with an Exception if a key is not a string-like obect.
    Perform this operation recursively on nested mapping if ``recursive`` is
    True.

    For example::
    >>> lower_keys({'baZ': 'Amd64', 'Foo': {'Bar': {'ABC': 'bAr'}}})
    {'baz': 'Amd64', 'foo': {'bar': {'abc': 'bAr'}}}
    >>> lower_keys({'Labels': {'Foo': 'Bar'}}, recursive=False)
    {'labels': {'Foo': 'Bar'}}
    """
    new_mapping = {}
    for key, value in mapping.items():
        if recursive and isinstance(value, dict):
            value = lower_keys(value)
        new_mapping[key.lower()] = value
    return new_mapping
