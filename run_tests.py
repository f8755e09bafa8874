#!/usr/bin/env python
# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Runs our unit tests and static checks. For usage information run this with
'--help'.
"""

import getopt
import os
import sys
import unittest

import tornode.util.conf
import tornode.util.log
import tornode.util.test_tools

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_PATHS = [os.path.join(BASE_DIR, path) for path in ('tornode', 'test', 'run_tests.py', 'setup.py')]

OPT = 't:l:qh'
OPT_EXPANDED = ['test=', 'log=', 'quiet', 'help']

HELP_MSG = """\
Usage: run_tests.py [OPTION]
Runs tests for the tornode library.

  -t, --test TEST_NAME      only run tests with this prefix, for instance
                              'test.unit.exit_policy'
  -l, --log RUNLEVEL        includes logging output with test results, runlevels:
                              TRACE, DEBUG, INFO, NOTICE, WARN, ERROR
  -q, --quiet               only provide test failures
  -h, --help                presents this help
"""

LOG_TYPE_ERROR = """\
'%s' isn't a logging runlevel, use one of the following instead:
  TRACE, DEBUG, INFO, NOTICE, WARN, ERROR
"""


def parse_args(argv):
  """
  Parses our commandline arguments.

  :param list argv: input arguments to be parsed

  :returns: **dict** of our arguments

  :raises: **ValueError** if we got an invalid argument
  """

  args = {
    'specific_test': [],
    'logging_runlevel': None,
    'quiet': False,
    'print_help': False,
  }

  try:
    recognized_args, unrecognized_args = getopt.getopt(argv, OPT, OPT_EXPANDED)

    if unrecognized_args:
      error_msg = "aren't recognized arguments" if len(unrecognized_args) > 1 else "isn't a recognized argument"
      raise getopt.GetoptError("'%s' %s" % ("', '".join(unrecognized_args), error_msg))
  except getopt.GetoptError as exc:
    raise ValueError('%s (for usage provide --help)' % exc)

  for opt, arg in recognized_args:
    if opt in ('-t', '--test'):
      args['specific_test'].append(arg)
    elif opt in ('-l', '--log'):
      arg = arg.upper()

      if arg not in tornode.util.log.LOG_VALUES:
        raise ValueError(LOG_TYPE_ERROR % arg)

      args['logging_runlevel'] = arg
    elif opt in ('-q', '--quiet'):
      args['quiet'] = True
    elif opt in ('-h', '--help'):
      args['print_help'] = True

  return args


def get_unit_tests(module_prefixes = None):
  """
  Provides our unit tests.

  :param list module_prefixes: only provide the test if its name starts with
    any of these substrings

  :returns: **unittest.TestSuite** with our unit tests
  """

  suite = unittest.TestSuite()
  discovered = unittest.defaultTestLoader.discover(os.path.join(BASE_DIR, 'test', 'unit'), top_level_dir = BASE_DIR)

  for test_case in _flatten(discovered):
    if not module_prefixes or any(test_case.id().startswith(prefix) for prefix in module_prefixes):
      suite.addTest(test_case)

  return suite


def _flatten(suite):
  for entry in suite:
    if isinstance(entry, unittest.TestSuite):
      for test_case in _flatten(entry):
        yield test_case
    else:
      yield entry


def _print_static_issues(issues, label):
  if not issues:
    return 0

  print('%s issues found...\n' % label)

  for path in sorted(issues):
    print('* %s' % os.path.relpath(path, BASE_DIR))

    for issue in issues[path]:
      print('  line %s - %s' % (issue.line_number, issue.message))

    print()

  return sum([len(path_issues) for path_issues in issues.values()])


def main():
  try:
    args = parse_args(sys.argv[1:])
  except ValueError as exc:
    print(exc)
    sys.exit(1)

  if args['print_help']:
    print(HELP_MSG)
    sys.exit()

  tornode.util.conf.get_config('test').load(os.path.join(BASE_DIR, 'test', 'settings.cfg'))

  if args['logging_runlevel']:
    tornode.util.log.log_to_stdout(args['logging_runlevel'])

  result = unittest.TextTestRunner(verbosity = 1 if args['quiet'] else 2).run(get_unit_tests(args['specific_test']))
  issue_count = 0

  if not args['specific_test']:
    if tornode.util.test_tools.is_pyflakes_available():
      issue_count += _print_static_issues(tornode.util.test_tools.pyflakes_issues(SRC_PATHS), 'Pyflakes')
    else:
      print('Static checks skipped, pyflakes is unavailable')

    if tornode.util.test_tools.is_pycodestyle_available():
      issue_count += _print_static_issues(tornode.util.test_tools.stylistic_issues(SRC_PATHS, prefer_single_quotes = True), 'Style')
    else:
      print('Style checks skipped, pycodestyle is unavailable')

  sys.exit(0 if result.wasSuccessful() and not issue_count else 1)


if __name__ == '__main__':
  main()
