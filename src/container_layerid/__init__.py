#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import re

# legacy v1 layer directory layout: <layer id>/json and <layer id>/layer.tar
LAYER_JSON_FILE = 'json'
LAYER_TAR_FILE = 'layer.tar'

DIGEST_ALGORITHM = 'sha256'

EMPTY_SHA256 = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
EMPTY_DIGEST = DIGEST_ALGORITHM + ':' + EMPTY_SHA256

is_valid_id = re.compile(r'^[a-f0-9]{64}$').match


def is_image_or_layer_id(s):
    """
    Return True if the string `s` looks like a layer ID e.g. a SHA256-like id
    with 64 lowercase hex characters and no algorithm prefix.
    """
    return bool(s and is_valid_id(s))


def validate_id(s):
    """
    Raise a ValueError if the string `s` is not a valid image or layer ID.
    """
    if not is_image_or_layer_id(s):
        raise ValueError(f'image ID {s!r} is invalid')
