#!/usr/bin/env python
# -*- encoding: utf-8 -*-

from glob import glob
from os.path import basename
from os.path import splitext

from setuptools import find_packages
from setuptools import setup


setup(
    name='container-layerid',
    version='1.0.0',
    license='Apache-2.0',
    description='Compute content-addressed ids of legacy container image layers.',
    long_description='Compute content-addressed ids of legacy container image layers.',
    author='nexB Inc.',
    author_email='info@nexb.com',
    url='https://github.com/nexB/container-inspector',
    packages=find_packages('src'),
    package_dir={'': 'src'},
    py_modules=[splitext(basename(path))[0] for path in glob('src/*.py')],
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.7',
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Operating System :: POSIX :: Linux',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: Microsoft :: Windows',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Utilities',
    ],
    keywords=[],
    install_requires=[
        'click',
        'attrs',
    ],
    extras_require={
        'testing': [
            'pytest',
            'commoncode',
        ],
    },

    entry_points={
        'console_scripts': [
            'container_layerid=container_layerid.cli:container_layerid',
        ],
    },
)
