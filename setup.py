#!/usr/bin/env python
# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information
#
# Release Checklist
# =================
#
# * Run the tests with the static checks...
#
#     % pip install -e .[test]
#     % python run_tests.py
#
# * Tag the release
#   |- Bump the version in tornode/__init__.py.
#   |- git commit -a -m "tornode release 1.0.0"
#   |- git tag -m "tornode release 1.0.0" 1.0.0
#   +- git push --tags
#
# * Final release
#   |- rm dist/*
#   |- python setup.py sdist
#   +- twine upload dist/*

import setuptools
import os
import re

SUMMARY = 'Library for configuring an onion routing node and deciding where it may relay traffic to.'

DESCRIPTION = """
tornode models an onion routing node: the roles it plays (entrance, relay,
and exit), the router descriptor it publishes, and the exit policy it
enforces. Exit policies follow tor's exitpattern syntax...

::

  from tornode.exit_policy import ExitPolicy

  policy = ExitPolicy('reject 10.0.0.0/8:*', 'accept *:80', 'accept *:443')
  policy.can_exit_to('93.184.216.34', 443)  # True

Quick Start
-----------

To install you can either use...

::

  pip install tornode

... or install from the source tarball. tornode supports Python 3.6 and above.
""".strip()

MANIFEST = """
include README.md
include MANIFEST.in
include run_tests.py
graft test
global-exclude __pycache__
global-exclude *.orig
global-exclude *.pyc
global-exclude *.swp
global-exclude *.swo
global-exclude *~
""".strip()

# installation requires us to be in our setup.py's directory

os.chdir(os.path.dirname(os.path.abspath(__file__)))

with open('MANIFEST.in', 'w') as manifest_file:
  manifest_file.write(MANIFEST)


def get_module_info():
  # reads the basic __stat__ strings from our module's init

  STAT_REGEX = re.compile(r"^__(.+)__ = '(.+)'$")
  result = {}
  cwd = os.path.sep.join(__file__.split(os.path.sep)[:-1])

  with open(os.path.join(cwd, 'tornode', '__init__.py')) as init_file:
    for line in init_file.readlines():
      line_match = STAT_REGEX.match(line)

      if line_match:
        keyword, value = line_match.groups()
        result[keyword] = value

  return result


module_info = get_module_info()

try:
  setuptools.setup(
    name = 'tornode',
    version = module_info['version'],
    description = SUMMARY,
    long_description = DESCRIPTION,
    license = module_info['license'],
    author = module_info['author'],
    author_email = module_info['contact'],
    packages = setuptools.find_packages(exclude = ['test*']),
    keywords = 'tor onion relay exit policy',
    python_requires = '>=3.6',
    extras_require = {
      'test': ['pycodestyle', 'pyflakes'],
    },
    classifiers = [
      'Development Status :: 4 - Beta',
      'Intended Audience :: Developers',
      'License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)',
      'Topic :: Security',
      'Topic :: Software Development :: Libraries :: Python Modules',
    ],
  )
finally:
  for filename in ['MANIFEST.in', 'MANIFEST']:
    if os.path.exists(filename):
      os.remove(filename)
