#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import logging
import os
import sys
import csv as csv_module
import json as json_module
from io import StringIO

import click

from container_layerid import DIGEST_ALGORITHM
from container_layerid import EMPTY_DIGEST
from container_layerid import LAYER_JSON_FILE
from container_layerid import LAYER_TAR_FILE
from container_layerid import validate_id
from container_layerid.identity import EncodingError
from container_layerid.identity import create_id
from container_layerid.layer import LayerMetadata
from container_layerid.layer import history_from_metadata
from container_layerid.utils import as_bare_id
from container_layerid.utils import file_digest

TRACE = False
logger = logging.getLogger(__name__)
if TRACE:
    logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)
    logger.setLevel(logging.DEBUG)


@click.command()
@click.argument('layer_dirs', metavar='LAYER_DIR', nargs=-1, required=True,
    type=click.Path(exists=True, file_okay=False, readable=True))
@click.option('--layer-digest', default=None, metavar='DIGEST',
    help='Use this layer content digest instead of the digest of the layer.tar '
         'file. Only valid with a single LAYER_DIR.')
@click.option('--parent', default='', metavar='ID',
    help='Id of the parent of the first LAYER_DIR, with or without a "sha256:" '
         'prefix. Empty for a root layer.')
@click.option('--csv', is_flag=True, default=False, help='Print information as CSV instead of JSON.')
@click.help_option('-h', '--help')
def container_layerid(layer_dirs, layer_digest=None, parent='', csv=False):
    """
    Compute the ids of the legacy layers in each LAYER_DIR, ordered from bottom
    to top layer. Each LAYER_DIR must contain a "json" layer metadata file and
    may contain a "layer.tar" layer archive. Report each layer id with the
    layer history data.
    Print information as JSON by default or as CSV with --csv.
    Output is printed to stdout. Use a ">" redirect to save in a file.
    """
    results = _container_layerid(
        layer_dirs,
        layer_digest=layer_digest,
        parent=parent,
        csv=csv,
    )
    click.echo(results)


def _container_layerid(layer_dirs, layer_digest=None, parent='', csv=False):
    if layer_digest and len(layer_dirs) != 1:
        raise click.UsageError('--layer-digest requires a single LAYER_DIR.')
    parent = get_parent_id(parent)

    layers = list(get_layers_ids(layer_dirs, layer_digest=layer_digest, parent=parent))
    as_json = not csv

    if as_json:
        return json_module.dumps(layers, indent=2)

    if not layers:
        return
    output = StringIO()
    keys = layers[0].keys()
    w = csv_module.DictWriter(output, keys)
    w.writeheader()
    for layer in layers:
        w.writerow(layer)
    val = output.getvalue()
    output.close()
    return val


def get_parent_id(parent):
    """
    Return a "sha256:<hex>" id from a `parent` layer id with or without a
    "sha256:" prefix, or an empty string if there is no `parent`.
    Raise a click.BadParameter if `parent` is not a valid layer id.
    """
    if not parent:
        return ''
    bare_id = as_bare_id(parent)
    try:
        validate_id(bare_id)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--parent') from e
    return f'{DIGEST_ALGORITHM}:{bare_id}'


def get_layers_ids(layer_dirs, layer_digest=None, parent=''):
    """
    Yield a mapping of layer data for each of the `layer_dirs` legacy layer
    directories, ordered from bottom to top. The `parent` is the id of the
    parent of the first layer.
    """
    for layer_dir in layer_dirs:
        layer_loc = os.path.abspath(os.path.expanduser(layer_dir))
        json_loc = os.path.join(layer_loc, LAYER_JSON_FILE)
        if not os.path.exists(json_loc):
            raise click.ClickException(f'Missing layer JSON file: {json_loc}')

        digest = layer_digest or file_digest(os.path.join(layer_loc, LAYER_TAR_FILE))

        try:
            metadata = LayerMetadata.from_file(json_loc)
            layer_id = create_id(metadata, digest, parent)
        except (EncodingError, ValueError, TypeError) as e:
            raise click.ClickException(f'Cannot compute layer id for {layer_dir}: {e}') from e

        if TRACE:
            logger.debug(f'get_layers_ids: {layer_dir}: {layer_id}')

        history = history_from_metadata(metadata, empty_layer=digest == EMPTY_DIGEST)
        layer_data = dict(
            layer_dir=layer_dir,
            layer_digest=digest,
            parent=parent,
            layer_id=layer_id,
        )
        layer_data.update(history.to_dict())
        yield layer_data
        parent = layer_id
