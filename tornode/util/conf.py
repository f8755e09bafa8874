# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Handlers for specially formatted configuration files. Entries are expected to
consist of simple key/value pairs, and anything after "#" is stripped as a
comment. Excess whitespace is trimmed and empty lines are ignored. For
instance...

::

  # node configuration
  relay.nickname caerSidi
  relay.onion_port 9001 # here's an inline comment
  exit.enabled true
  exit.rule accept *:80
  exit.rule accept *:443
  relay.contact

... would be loaded as five keys. The 'exit.rule' key has two values, in the
order they appear, and the last key's value is an empty string. Multi-line
entries can be defined by providing an entry followed by lines with a '|'
prefix. For instance...

::

  relay.contact
  |Jane Doe
  |jane at example dot com

The :class:`~tornode.util.conf.Config` class acts as a central store for
configuration values, providing type inference when values are fetched with a
default.

**Module Overview:**

::

  get_config - singleton for getting configurations

  Config - Custom configuration
    |- load - reads a configuration file
    |- save - writes the current configuration to a file
    |- clear - empties our loaded configuration contents
    |- synchronize - replaces mappings in a dictionary with the config's values
    |- keys - provides keys in the loaded configuration
    |- set - sets the given key/value pair
    |- unused_keys - provides keys that have never been requested
    |- get - provides the value for a given key, with type inference
    +- get_value - provides the value for a given key as a string
"""

import os
import threading

from tornode.util import log

from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Union

CONFS = {}  # type: Dict[str, Config]


def get_config(handle: str) -> 'tornode.util.conf.Config':
  """
  Singleton constructor for configuration file instances. If a configuration
  already exists for the handle then it's returned. Otherwise a fresh instance
  is constructed.

  :param handle: unique identifier used to access this config instance
  """

  if handle not in CONFS:
    CONFS[handle] = Config()

  return CONFS[handle]


class Config(object):
  """
  Handler for easily working with custom configurations, providing persistence
  to and from files. All operations are thread safe.

  **Example usage:**

  User has a file at '/home/atagar/tornode.cfg' with...

  ::

    relay.nickname caerSidi
    relay.onion_port blarg

  And they have a script with...

  ::

    import tornode.util.conf

    # Configuration values we'll use in this file. These are mappings of
    # configuration keys to the default values we'll use if the user doesn't
    # have something different in their config file (or it doesn't match this
    # type).

    relay_config = {
      'relay.nickname': 'Unnamed',
      'relay.onion_port': 9374,
      'exit.rule': [],
    }

    user_config = tornode.util.conf.get_config('node')

    try:
      user_config.load('/home/atagar/tornode.cfg')
    except IOError as exc:
      print("Unable to load the user's config: %s" % exc)

    # Replaces the contents of relay_config with the values from the user's
    # config file if...
    #
    # * the key is present in the config file
    # * we're able to convert the configuration file's value to the same type
    #   as what's in the mapping (see the Config.get() method for how these
    #   type inferences work)
    #
    # In this case 'relay.onion_port' is left at 9374 because we can't turn
    # "blarg" into an integer, so relay_config becomes...
    #
    #   {
    #     'relay.nickname': 'caerSidi',
    #     'relay.onion_port': 9374,
    #     'exit.rule': [],
    #   }

    user_config.synchronize(relay_config)
  """

  def __init__(self) -> None:
    self._path = None  # type: Optional[str]
    self._contents = {}  # type: Dict[str, List[str]]
    self._contents_lock = threading.RLock()

    # keys that have been requested (used to provide unused config contents)
    self._requested_keys = set()  # type: Set[str]

  def load(self, path: Optional[str] = None) -> None:
    """
    Reads in the contents of the given path, adding its configuration values
    to our current contents. If the path is a directory then this loads each
    of the files, recursively.

    :param path: file or directory path to be loaded, this uses the last
      loaded path if not provided

    :raises:
      * **IOError** if we fail to read the file (it doesn't exist, insufficient permissions, etc)
      * **ValueError** if no path was provided and we've never been provided one
    """

    if path:
      self._path = path
    elif not self._path:
      raise ValueError('Unable to load configuration: no path provided')

    if os.path.isdir(self._path):
      for root, dirnames, filenames in os.walk(self._path):
        for filename in sorted(filenames):
          self.load(os.path.join(root, filename))

      return

    with open(self._path, 'r') as config_file:
      read_contents = config_file.readlines()

    with self._contents_lock:
      while read_contents:
        line = read_contents.pop(0)

        # strips any commenting or excess whitespace

        comment_start = line.find('#')

        if comment_start != -1:
          line = line[:comment_start]

        line = line.strip()

        # parse the key/value pair

        if line:
          if ' ' in line:
            key, value = line.split(' ', 1)
            self.set(key, value.strip(), False)
          else:
            # this might be a multi-line entry, try processing it as such
            multiline_buffer = []

            while read_contents and read_contents[0].lstrip().startswith('|'):
              content = read_contents.pop(0).lstrip()[1:]  # removes '\s+|' prefix
              content = content.rstrip('\n')  # trailing newline
              multiline_buffer.append(content)

            if multiline_buffer:
              self.set(line, '\n'.join(multiline_buffer), False)
            else:
              self.set(line, '', False)  # default to a key => '' mapping

  def save(self, path: Optional[str] = None) -> None:
    """
    Saves configuration contents to disk. If a path is provided then it
    replaces the configuration location that we track.

    :param path: location to be saved to

    :raises:
      * **IOError** if we fail to save the file (insufficient permissions, etc)
      * **ValueError** if no path was provided and we've never been provided one
    """

    if path:
      self._path = path
    elif not self._path:
      raise ValueError('Unable to save configuration: no path provided')

    with self._contents_lock:
      config_dir = os.path.dirname(self._path)

      if config_dir and not os.path.exists(config_dir):
        os.makedirs(config_dir)

      with open(self._path, 'w') as output_file:
        for entry_key in self.keys():
          for entry_value in self.get_value(entry_key, multiple = True):
            # check for multi line entries
            if '\n' in entry_value:
              entry_value = '\n|' + entry_value.replace('\n', '\n|')

            output_file.write('%s %s\n' % (entry_key, entry_value))

  def clear(self) -> None:
    """
    Drops the configuration contents and reverts back to a blank, unloaded
    state.
    """

    with self._contents_lock:
      self._contents.clear()
      self._requested_keys = set()

  def synchronize(self, conf_mappings: Dict[str, Any], limits: Optional[Mapping[str, Any]] = None) -> None:
    """
    This takes a dictionary of 'config_key => default_value' mappings and
    changes the values to reflect our current configuration. This will leave
    the previous values alone if...

    * we don't have a value for that config_key
    * we can't convert our value to be the same type as the default_value

    For more information about how we convert types see our
    :func:`~tornode.util.conf.Config.get` method.

    :param conf_mappings: configuration key/value mappings to be revised
    :param limits: mappings of limits on numeric values, expected to be of
      the form "configKey -> min" or "configKey -> (min, max)"
    """

    if limits is None:
      limits = {}

    for entry in conf_mappings.keys():
      val = self.get(entry, conf_mappings[entry])

      # if this was a numeric value then apply constraints
      if entry in limits and isinstance(val, (int, float)) and not isinstance(val, bool):
        if isinstance(limits[entry], tuple):
          val = max(val, limits[entry][0])
          val = min(val, limits[entry][1])
        else:
          val = max(val, limits[entry])

      # only use this value if it wouldn't change the type of the mapping (this
      # will only fail if the type isn't either a string or one of the types
      # recognized by the get method)

      if type(val) == type(conf_mappings[entry]):
        conf_mappings[entry] = val

  def keys(self) -> List[str]:
    """
    Provides all keys in the currently loaded configuration.

    :returns: **list** if strings for the configuration keys we've loaded
    """

    return list(self._contents.keys())

  def unused_keys(self) -> Set[str]:
    """
    Provides the configuration keys that have never been provided to a caller
    via :func:`~tornode.util.conf.Config.get`,
    :func:`~tornode.util.conf.Config.get_value`, or
    :func:`~tornode.util.conf.Config.synchronize`.

    :returns: **set** of configuration keys we've loaded but have never been requested
    """

    return set(self.keys()).difference(self._requested_keys)

  def set(self, key: str, value: Union[str, Sequence[str]], overwrite: bool = True) -> None:
    """
    Appends the given key/value configuration mapping, behaving the same as if
    we'd loaded this from a configuration file.

    :param key: key for the configuration mapping
    :param value: value we're setting the mapping to
    :param overwrite: replaces the previous value if **True**, otherwise
      the values are appended
    """

    with self._contents_lock:
      if isinstance(value, str):
        if not overwrite and key in self._contents:
          self._contents[key].append(value)
        else:
          self._contents[key] = [value]
      elif isinstance(value, (list, tuple)):
        if not overwrite and key in self._contents:
          self._contents[key] += value
        else:
          self._contents[key] = list(value)
      else:
        raise ValueError("Config.set() only accepts str (bytes or unicode), list, or tuple. Provided value was a '%s'" % type(value))

  def get(self, key: str, default: Optional[Any] = None) -> Any:
    """
    Fetches the given configuration, using the key and default value to
    determine the type it should be. Recognized inferences are:

    * **default is a boolean => boolean**

      * values are case insensitive
      * provides the default if the value isn't "true" or "false"

    * **default is an integer => int**

      * provides the default if the value can't be converted to an int

    * **default is a float => float**

      * provides the default if the value can't be converted to a float

    * **default is a list => list**

      * string contents for all configuration values with this key

    * **default is a tuple => tuple**

      * string contents for all configuration values with this key

    * **default is a dictionary => dict**

      * values without "=>" in them are ignored
      * values are split into key/value pairs on "=>" with extra whitespace
        stripped

    :param key: config setting to be fetched
    :param default: value provided if no such key exists or fails to be converted

    :returns: given configuration value with its type inferred with the above rules
    """

    is_multivalue = isinstance(default, (list, tuple, dict))
    val = self.get_value(key, default, is_multivalue)

    if val == default:
      return val  # don't try to infer undefined values

    if isinstance(default, bool):
      if val.lower() == 'true':
        val = True
      elif val.lower() == 'false':
        val = False
      else:
        log.debug("Config entry '%s' is expected to be a boolean, defaulting to '%s'" % (key, str(default)))
        val = default
    elif isinstance(default, int):
      try:
        val = int(val)
      except ValueError:
        log.debug("Config entry '%s' is expected to be an integer, defaulting to '%i'" % (key, default))
        val = default
    elif isinstance(default, float):
      try:
        val = float(val)
      except ValueError:
        log.debug("Config entry '%s' is expected to be a float, defaulting to '%f'" % (key, default))
        val = default
    elif isinstance(default, list):
      val = list(val)  # make a shallow copy
    elif isinstance(default, tuple):
      val = tuple(val)
    elif isinstance(default, dict):
      val_map = {}

      for entry in val:
        if '=>' in entry:
          entry_key, entry_val = entry.split('=>', 1)
          val_map[entry_key.strip()] = entry_val.strip()
        else:
          log.debug('Ignoring invalid %s config entry (expected a mapping, but "%s" was missing "=>")' % (key, entry))

      val = val_map

    return val

  def get_value(self, key: str, default: Optional[Any] = None, multiple: bool = False) -> Union[str, List[str]]:
    """
    This provides the current value associated with a given key.

    :param key: config setting to be fetched
    :param default: value provided if no such key exists
    :param multiple: provides back a list of all values if **True**,
      otherwise this returns the last loaded configuration value

    :returns: **str** or **list** of string configuration values associated
      with the given key, providing the default if no such key exists
    """

    with self._contents_lock:
      if key in self._contents:
        self._requested_keys.add(key)

        if multiple:
          return self._contents[key]
        else:
          return self._contents[key][-1]
      else:
        message_id = 'tornode.util.conf.missing_config_key_%s' % key
        log.log_once(message_id, log.TRACE, "config entry '%s' not found, defaulting to '%s'" % (key, default))
        return default
