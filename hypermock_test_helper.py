#!/usr/bin/env python
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Interfaces and subjects used by the HyperMock tests."""

import abc
import typing

import hypermock


class UserService(abc.ABC):
  """Stores users and their roles."""

  @property
  @abc.abstractmethod
  def Help(self) -> str:
    """Usage help for the service."""

  @property
  @abc.abstractmethod
  def CurrentRole(self) -> str:
    """Role of the signed-in user."""

  @CurrentRole.setter
  @abc.abstractmethod
  def CurrentRole(self, role) -> None:
    pass

  @abc.abstractmethod
  def Save(self, name, role=None) -> bool:
    pass

  @abc.abstractmethod
  async def SaveAsync(self, name) -> bool:
    pass

  @abc.abstractmethod
  def Delete(self, name) -> None:
    pass

  @abc.abstractmethod
  async def DeleteAsync(self, name) -> None:
    pass


class UserController(object):
  """Passes requests through to a UserService."""

  def __init__(self, user_service):
    self._user_service = user_service

  def GetHelp(self):
    return self._user_service.Help

  def GetCurrentRole(self):
    return self._user_service.CurrentRole

  def SetCurrentRole(self, role):
    self._user_service.CurrentRole = role

  def Save(self, name, role=None):
    if role is None:
      return self._user_service.Save(name)
    return self._user_service.Save(name, role)

  async def SaveAsync(self, name):
    return await self._user_service.SaveAsync(name)

  def Delete(self, name):
    self._user_service.Delete(name)

  async def DeleteAsync(self, name):
    await self._user_service.DeleteAsync(name)


class TempChangedEventArgs(object):

  def __init__(self, value):
    self.value = value


class ThermostatService(abc.ABC):
  """Reports temperature changes and switches the heating."""

  Hot = hypermock.Event()
  Cold = hypermock.Event()
  TempChanged = hypermock.Event()

  @abc.abstractmethod
  def SwitchOn(self) -> None:
    pass

  @abc.abstractmethod
  def SwitchOff(self) -> None:
    pass

  @abc.abstractmethod
  def ChangeTemp(self, value) -> None:
    pass


class Thermostat(ThermostatService):
  """A working ThermostatService that fires its events on demand."""

  def __init__(self):
    self.switched_on = False
    self.temperature = None

  def SwitchOn(self):
    self.switched_on = True

  def SwitchOff(self):
    self.switched_on = False

  def ChangeTemp(self, value):
    self.temperature = value
    self.TempChanged.Fire(TempChangedEventArgs(value))


class ThermostatController(object):
  """Reacts to the events of a ThermostatService."""

  def __init__(self, thermostat_service):
    self._thermostat_service = thermostat_service
    thermostat_service.Hot += self.OnSwitchOff
    thermostat_service.Cold -= self.OnSwitchOn
    thermostat_service.TempChanged += self.OnTempChanged

  def OnSwitchOn(self, sender, event_data):
    self._thermostat_service.SwitchOn()

  def OnSwitchOff(self, sender, event_data):
    self._thermostat_service.SwitchOff()

  def OnTempChanged(self, sender, event_data):
    self._thermostat_service.ChangeTemp(event_data.value)


class Catalog(abc.ABC):
  """A container-like service."""

  PAGE_SIZE = 20

  @abc.abstractmethod
  def __getitem__(self, key):
    pass

  @abc.abstractmethod
  def __setitem__(self, key, value) -> None:
    pass

  @abc.abstractmethod
  def __contains__(self, key) -> bool:
    pass

  @abc.abstractmethod
  def __iter__(self):
    pass

  @abc.abstractmethod
  def __len__(self) -> int:
    pass

  @abc.abstractmethod
  def __call__(self, query):
    pass

  @staticmethod
  def Normalize(title):
    return title.lower()

  @classmethod
  def Open(cls, path):
    raise NotImplementedError

  def Search(self, *terms, **options):
    raise NotImplementedError


class ReportService(abc.ABC):
  """Members whose shape comes only from their annotations."""

  @abc.abstractmethod
  def Fetch(self) -> typing.Awaitable[str]:
    pass

  @abc.abstractmethod
  def Flush(self) -> typing.Awaitable[None]:
    pass

  @abc.abstractmethod
  def Close(self) -> None:
    pass

  @abc.abstractmethod
  def Name(self):
    pass


class Unprintable(object):
  """An argument that cannot be converted to a string."""

  def __str__(self):
    raise RuntimeError('no str')

  def __repr__(self):
    raise RuntimeError('no repr')
