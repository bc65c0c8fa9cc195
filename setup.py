#!/usr/bin/env python

# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""
<Program Name>
  setup.py

<Purpose>
  BUILD SOURCE DISTRIBUTION

  The following shell command generates a tufserver source archive that can
  be distributed to other users.  The packaged source is saved to the 'dist'
  folder in the current directory.

  $ python -m build --sdist


  INSTALLATION OPTIONS

  # From the root directory of the unpacked archive.
  $ pip install .

  # Including the test requirements.
  $ pip install .[test]
"""

from setuptools import setup
from setuptools import find_packages


with open('README.md') as file_object:
  long_description = file_object.read()


setup(
  name = 'tufserver',
  version = '0.1.0', # If updating version, also update it in tufserver/__init__.py
  description = 'Asynchronous client for TUF reposerver and director services',
  long_description = long_description,
  long_description_content_type='text/markdown',
  keywords = 'update updater tuf reposerver director metadata client',
  classifiers = [
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'License :: OSI Approved :: MIT License',
    'License :: OSI Approved :: Apache Software License',
    'Natural Language :: English',
    'Operating System :: OS Independent',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3 :: Only',
    'Programming Language :: Python :: Implementation :: CPython',
    'Topic :: Security',
    'Topic :: Software Development'
  ],
  python_requires=">=3.9, <4",
  install_requires = [
    'requests>=2.19.1',
    'securesystemslib>=0.26.0'
  ],
  extras_require = {
    'test': ['pytest']
  },
  packages = find_packages(exclude=['tests', 'tests.*'])
)
