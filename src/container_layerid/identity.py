#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import json
import logging

import attr

from container_layerid.utils import digest_bytes

TRACE = False
logger = logging.getLogger(__name__)
if TRACE:
    import sys
    logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)
    logger.setLevel(logging.DEBUG)

"""
Compute the content-addressed id of a legacy layer from its LayerMetadata, the
digest of its content and the id of its parent layer.

The id is the SHA256 digest of the canonical JSON form of the metadata where:
- the metadata own "id" is cleared first,
- a "layer_id" key is added with the layer content digest,
- a "parent" key is added with the parent id only for a non-root layer,
- top-level keys are sorted lexicographically. Nested objects keep their
  declared field order and nested mappings are sorted by key.

The JSON is compact and UTF-8 encoded. The characters <, > and & and the line
and paragraph separators U+2028 and U+2029 are escaped as \\u00XX or \\u20XX.
Changing any of these rules changes every computed id.
"""

# characters always escaped with their code point in the canonical JSON
ESCAPED_CHARACTERS = '<>&\u2028\u2029'


class EncodingError(Exception):
    """
    Raised when a layer metadata cannot be serialized to its canonical form.
    """


def escape_json(text):
    """
    Return a JSON `text` with ESCAPED_CHARACTERS escaped.

    For example::
    >>> escape_json('{"a":"<b> & c"}')
    '{"a":"\\\\u003cb\\\\u003e \\\\u0026 c"}'
    """
    for char in ESCAPED_CHARACTERS:
        text = text.replace(char, '\\u%04x' % ord(char))
    return text


def canonical_json(mapping):
    """
    Return canonical JSON bytes for a `mapping`. The `mapping` top-level keys are
    sorted and nested values are serialized in their existing order.
    Raise an EncodingError if the `mapping` cannot be serialized.
    """
    mapping = dict(sorted(mapping.items()))
    try:
        text = json.dumps(mapping, ensure_ascii=False, separators=(',', ':'))
        return escape_json(text).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise EncodingError(f'Cannot serialize to canonical JSON: {e}') from e


def identity_content(metadata, layer_digest, parent=''):
    """
    Return the canonical JSON bytes hashed to compute the id of a layer with
    `metadata` LayerMetadata, `layer_digest` content digest and `parent` id.
    The `metadata` object is not modified.
    """
    metadata = attr.evolve(metadata, id='')
    try:
        canonical = metadata.to_canonical()
    except (TypeError, ValueError) as e:
        raise EncodingError(f'Cannot canonicalize layer metadata: {e}') from e

    canonical['layer_id'] = layer_digest
    # an empty parent is absent, not an empty string
    if parent:
        canonical['parent'] = parent

    return canonical_json(canonical)


def create_id(metadata, layer_digest, parent=''):
    """
    Return a "sha256:<hex>" id string for a layer with `metadata`
    LayerMetadata, `layer_digest` content digest string and an optional
    `parent` id string of the parent layer. An empty `parent` is for a root
    layer.

    The returned id does not depend on the `metadata.id` value.
    Raise an EncodingError if the metadata cannot be serialized.
    """
    if not layer_digest:
        raise ValueError('create_id: layer_digest is a required argument')

    content = identity_content(metadata, layer_digest, parent)
    layer_id = digest_bytes(content)
    if TRACE:
        logger.debug(f'create_id: {layer_id} for layer: {layer_digest} parent: {parent!r}')
    return layer_id


derive = create_id


def derive_chain(layers):
    """
    Return a list of layer ids given a `layers` iterable of tuples of
    (LayerMetadata, layer_digest) ordered from bottom to top layer. Each layer
    id is used as the parent of the next layer.
    """
    layer_ids = []
    parent = ''
    for metadata, layer_digest in layers:
        layer_id = create_id(metadata, layer_digest, parent)
        layer_ids.append(layer_id)
        parent = layer_id
    return layer_ids
