# The MIT License (MIT)
#
# Copyright (c) 2018 Niklas Rosenstein
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Caches captured environment snapshots on disk. Running a toolchain setup script can take
several seconds and the result rarely changes between two invocations.
"""

import base64
import json
import logging
import os
import time
import typing as t

from nr.caching.api import KeyDoesNotExist, KeyValueStore

from batchvars.environment import EnvironmentSnapshot

log = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = os.path.join('~', '.batchvars-cache.json')


class JsonFileStore(KeyValueStore):
  """
  A very simple key value store backed by a JSON file. Writes the JSON on every update. Not
  supported in a threading or multiprocessing context.
  """

  def __init__(self, filename: str) -> None:
    self._filename = filename
    self._values: t.Optional[t.Dict[str, t.Dict]] = None

  def _get_values(self) -> t.Dict[str, t.Dict]:
    if self._values is None and os.path.isfile(self._filename):
      with open(self._filename) as fp:
        self._values = json.load(fp)
    elif self._values is None:
      self._values = {}
    return self._values

  def _save(self) -> None:
    directory = os.path.dirname(self._filename)
    if directory:
      os.makedirs(directory, exist_ok=True)
    with open(self._filename, 'w') as fp:
      json.dump(self._values, fp)

  def load(self, key: str) -> bytes:
    values = self._get_values()
    try:
      entry = values[key]
    except KeyError:
      raise KeyDoesNotExist(key)
    if entry['exp'] is not None and entry['exp'] < time.time():
      del values[key]
      raise KeyDoesNotExist(key)
    return base64.b85decode(entry['val'].encode('ascii'))

  def store(self, key: str, value: bytes, expires_in: t.Optional[int] = None) -> None:
    exp = time.time() + expires_in if expires_in is not None else None
    self._get_values()[key] = {'val': base64.b85encode(value).decode('ascii'), 'exp': exp}
    self._save()

  def expunge(self) -> None:
    now = time.time()
    data = self._get_values()
    expired = [k for k, v in data.items() if v['exp'] is not None and v['exp'] < now]
    for key in expired:
      del data[key]
    if expired:
      self._save()


class SnapshotCache:
  """
  Stores #EnvironmentSnapshot objects in a #KeyValueStore. Entries expire after *expires_in*
  seconds, or never if it is #None.
  """

  def __init__(self, store: KeyValueStore, expires_in: t.Optional[int] = None) -> None:
    self._store = store
    self._expires_in = expires_in

  @classmethod
  def from_file(cls, filename: str, expires_in: t.Optional[int] = None) -> 'SnapshotCache':
    return cls(JsonFileStore(os.path.expanduser(filename)), expires_in)

  def get(self, key: str) -> t.Optional[EnvironmentSnapshot]:
    try:
      data = self._store.load(key)
    except KeyDoesNotExist:
      log.debug('cache miss: %r', key)
      return None
    log.debug('cache hit: %r', key)
    return [(k, v) for k, v in json.loads(data.decode('utf8'))]

  def put(self, key: str, snapshot: EnvironmentSnapshot) -> None:
    data = json.dumps([list(x) for x in snapshot]).encode('utf8')
    self._store.store(key, data, self._expires_in)
