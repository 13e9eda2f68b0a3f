#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import os

from commoncode import testcase

from container_layerid import EMPTY_DIGEST
from container_layerid import is_image_or_layer_id
from container_layerid import validate_id
from container_layerid import utils


class TestUtils(testcase.FileBasedTesting):
    test_data_dir = os.path.join(os.path.dirname(__file__), 'data')

    def test_digest_bytes(self):
        assert utils.digest_bytes(b'') == EMPTY_DIGEST
        assert utils.digest_bytes(b'hello\n') == (
            'sha256:5891b5b522d5df086d0ff0b110fbd9d21bb4fc7163af34d08286a2e846f6be03')

    def test_file_digest(self):
        test_file = self.get_temp_file()
        with open(test_file, 'wb') as out:
            out.write(b'hello\n')
        assert utils.file_digest(test_file) == (
            'sha256:5891b5b522d5df086d0ff0b110fbd9d21bb4fc7163af34d08286a2e846f6be03')
        assert utils.sha256_digest(test_file) == (
            '5891b5b522d5df086d0ff0b110fbd9d21bb4fc7163af34d08286a2e846f6be03')

    def test_file_digest_of_missing_file_is_the_empty_digest(self):
        missing = os.path.join(self.get_temp_dir(), 'layer.tar')
        assert utils.file_digest(missing) == EMPTY_DIGEST
        assert utils.sha256_digest(missing) is None

    def test_as_bare_id(self):
        assert utils.as_bare_id('sha256:1234') == '1234'
        assert utils.as_bare_id('1234') == '1234'
        assert utils.as_bare_id('') == ''
        assert utils.as_bare_id(None) is None

    def test_lower_keys(self):
        data = {'Foo': {'Bar': 1}}
        assert utils.lower_keys(data) == {'foo': {'bar': 1}}
        assert utils.lower_keys(data, recursive=False) == {'foo': {'Bar': 1}}

    def test_load_json(self):
        test_file = self.get_test_loc('layers/child/json')
        data = utils.load_json(test_file)
        assert data['os'] == 'linux'


def test_is_image_or_layer_id():
    assert is_image_or_layer_id('a' * 64)
    assert not is_image_or_layer_id('A' * 64)
    assert not is_image_or_layer_id('a' * 63)
    assert not is_image_or_layer_id('sha256:' + 'a' * 64)
    assert not is_image_or_layer_id('')
    assert not is_image_or_layer_id(None)


def test_validate_id():
    validate_id('0123456789abcdef' * 4)
    try:
        validate_id('sha256:' + 'a' * 64)
        raise AssertionError('Exception not raised')
    except ValueError as e:
        assert 'is invalid' in str(e)
