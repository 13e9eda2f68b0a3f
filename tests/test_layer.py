#
# Copyright (c) nexB Inc. and others. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
# See http://www.apache.org/licenses/LICENSE-2.0 for the license text.
# See https://github.com/nexB/container-inspector for support or download.
# See https://aboutcode.org for more information about nexB OSS projects.
#

import datetime
import os

from commoncode.testcase import FileBasedTesting

from container_layerid.config import RuntimeConfig
from container_layerid.layer import History
from container_layerid.layer import LayerMetadata
from container_layerid.layer import canonical_timestamp
from container_layerid.layer import history_from_metadata

from utilities import check_expected


class TestLayerMetadata(FileBasedTesting):
    test_data_dir = os.path.join(os.path.dirname(__file__), 'data')

    def test_LayerMetadata_from_file(self):
        test_file = self.get_test_loc('layers/base/json')
        expected = self.get_test_loc('layers/base/json-expected.json')
        result = LayerMetadata.from_file(test_file).to_dict()
        check_expected(result, expected, regen=False)

    def test_LayerMetadata_from_file_with_one_or_many_values(self):
        test_file = self.get_test_loc('layers/child/json')
        metadata = LayerMetadata.from_file(test_file)
        assert metadata.config.entrypoint == ('/docker-entrypoint.sh',)
        assert metadata.container_config.cmd == ('/bin/sh', '-c', '#(nop) CMD ["/bin/sh"]')
        assert metadata.container_config.healthcheck.interval == 30000000000
        assert metadata.container_config.healthcheck.retries == 3
        assert metadata.size == 0

    def test_LayerMetadata_defaults(self):
        metadata = LayerMetadata()
        assert metadata.id == ''
        assert metadata.created is None
        assert metadata.container_config == RuntimeConfig()
        assert metadata.config is None

    def test_LayerMetadata_with_null_container_config_has_an_empty_config(self):
        metadata = LayerMetadata.from_data({'container_config': None, 'config': None})
        assert metadata.container_config == RuntimeConfig()
        assert metadata.config is None
        assert LayerMetadata(container_config=None).container_config == RuntimeConfig()

    def test_LayerMetadata_converts_config_mappings_to_RuntimeConfig(self):
        metadata = LayerMetadata(
            config={'Cmd': '/bin/sh'},
            container_config={'Env': ['A=1']},
        )
        assert metadata.config == RuntimeConfig(cmd=['/bin/sh'])
        assert metadata.container_config == RuntimeConfig(env=['A=1'])
        assert list(metadata.to_canonical()['config'])[:3] == ['Hostname', 'Domainname', 'User']

    def test_LayerMetadata_fails_with_invalid_config_values(self):
        for kwargs in (dict(config='/bin/sh'), dict(container_config=['/bin/sh'])):
            try:
                LayerMetadata(**kwargs)
                self.fail(f'Exception not raised for: {kwargs!r}')
            except TypeError:
                pass

    def test_LayerMetadata_to_canonical_keeps_declared_order_and_null_created(self):
        metadata = LayerMetadata(id='x', os='linux', size=10, comment='hi')
        canonical = metadata.to_canonical()
        assert list(canonical) == ['id', 'comment', 'created', 'container_config', 'os', 'Size']
        assert canonical['created'] is None

    def test_canonical_timestamp(self):
        assert canonical_timestamp(None) is None
        assert canonical_timestamp('2014-10-13T21:19:18.674353812Z') == '2014-10-13T21:19:18.674353812Z'
        assert canonical_timestamp('2014-10-13T21:19:18.1234567891Z') == '2014-10-13T21:19:18.123456789Z'
        assert canonical_timestamp('2014-10-13T21:19:18.100Z') == '2014-10-13T21:19:18.1Z'
        assert canonical_timestamp('2014-10-13T21:19:18-00:00') == '2014-10-13T21:19:18Z'
        assert canonical_timestamp('2014-10-13T21:19:18+02:00') == '2014-10-13T21:19:18+02:00'

    def test_canonical_timestamp_with_datetime(self):
        tz = datetime.timezone(datetime.timedelta(hours=-5))
        value = datetime.datetime(2014, 10, 13, 21, 19, 18, tzinfo=tz)
        assert canonical_timestamp(value) == '2014-10-13T21:19:18-05:00'
        value = datetime.datetime(2014, 10, 13, 21, 19, 18, 120)
        assert canonical_timestamp(value) == '2014-10-13T21:19:18.00012Z'

    def test_canonical_timestamp_fails_on_invalid_values(self):
        invalid_values = (
            '',
            '2014-10-13',
            '2014-10-13 21:19:18Z',
            1413235158,
            '2021-02-30T00:00:00Z',
            '2021-13-01T00:00:00Z',
            '2021-01-01T25:00:00Z',
            '2021-01-01T00:60:00Z',
            '2021-01-01T00:00:60Z',
            '2021-01-01T00:00:00+99:00',
            '2021-01-01T00:00:00+01:60',
            '2021-01-01T00:00:00Z\n',
            # ARABIC-INDIC DIGIT TWO
            chr(0x0662) + '021-01-01T00:00:00Z',
        )
        for value in invalid_values:
            try:
                canonical_timestamp(value)
                self.fail(f'Exception not raised for: {value!r}')
            except ValueError:
                pass


class TestHistory(FileBasedTesting):
    test_data_dir = os.path.join(os.path.dirname(__file__), 'data')

    def test_history_from_metadata(self):
        test_file = self.get_test_loc('layers/child/json')
        metadata = LayerMetadata.from_file(test_file)
        history = history_from_metadata(metadata)
        expected = History(
            author='',
            created='2014-10-13T21:20:01+00:00',
            created_by='/bin/sh -c #(nop) CMD ["/bin/sh"]',
            comment='set the default command',
            empty_layer=False,
        )
        assert history == expected

    def test_history_from_metadata_of_empty_layer_without_command(self):
        history = history_from_metadata(LayerMetadata(author='nexB'), empty_layer=True)
        assert history.to_dict() == dict(
            author='nexB',
            created=None,
            created_by='',
            comment='',
            empty_layer=True,
        )
