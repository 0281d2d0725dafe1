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

"""HyperMock, an interface mocking framework for Python.

HyperMock works in the setup-exercise-verify paradigm. A mock stands in for
a dependency that is described only by a class (usually an abc.ABC). Before
the code under test runs, expectations are registered with a lambda that uses
the mock the way the code under test will; each expectation is given an
outcome. The code under test then uses the mock as it would use the real
dependency: every call is matched against the registered expectations, first
registered first. Afterwards the test verifies how often members were used.

Suggested usage / workflow:

  # Create a mock of the dependency.
  user_service = hypermock.CreateMock(UserService)

  # Register expectations and their outcomes.
  hypermock.Setup(user_service, lambda p: p.Save('Homer')).Returns(True)
  hypermock.Setup(user_service,
                  lambda p: p.Save(hypermock.IsAny(), 'Manager')).Returns(False)
  hypermock.SetupGet(user_service, lambda p: p.Help).Returns('Some help')
  hypermock.Setup(user_service,
                  lambda p: p.SaveAsync('Bart')).FailsWith(IOError)

  # Exercise the code under test.
  controller = UserController(user_service)
  controller.Save('Homer')

  # Verify how the mock was used.
  hypermock.Verify(user_service, lambda p: p.Save('Homer'), hypermock.Once())

A call that matches no expectation raises UnmockedCallError. Property writes
are always accepted and recorded, so they can be checked with VerifySet.
Events declared with Event() are captured when the code under test subscribes
and can be triggered with Raise().
"""

import asyncio
import collections.abc
import inspect
import logging
import typing


logger = logging.getLogger(__name__)


class Error(AssertionError):
  """Base exception for this module."""

  pass


class UnmockedCallError(Error):
  """Raised when a call matches no registered expectation."""

  def __init__(self, name, call_args):
    """Init exception.

    Args:
      # name: The intercepted member name, e.g. 'Save' or 'get_Help'.
      # call_args: The actual arguments of the call.
      name: str
      call_args: tuple
    """
    self.name = name
    self.call_args = tuple(call_args)
    Error.__init__(self, _RenderCall(name, self.call_args))


class VerificationError(Error):
  """Raised when the recorded usage of a mock does not satisfy a verify call.
  """

  def __init__(self, message, expected=None, actual=None):
    Error.__init__(self, message)
    self.expected = expected
    self.actual = actual


class MockUsageError(Error):
  """Raised when the mocking API itself is used incorrectly."""

  pass


class UnknownMemberError(Error):
  """Raised when a member that the mocked class does not declare is used."""

  def __init__(self, name, interface_name):
    Error.__init__(self, 'Member is not declared by %s: %s'
                   % (interface_name, name))
    self.name = name


class PrivateAttributeError(Error):
  """Raised when a private attribute is passed to a mock at creation."""

  def __init__(self, attr):
    Error.__init__(self, 'Attribute %r is private and should not be available '
                   'in a mock object.' % attr)
    self.attr = attr


def _IsDunder(name):
  return name.startswith('__') and name.endswith('__')


def _GetterName(name):
  return 'get_' + name


def _SetterName(name):
  return 'set_' + name


def _AdderName(name):
  return 'add_' + name


def _RemoverName(name):
  return 'remove_' + name


def _DisplayName(name):
  """Strip a property accessor prefix from a member name."""
  for prefix in ('get_', 'set_'):
    if name.startswith(prefix):
      return name[len(prefix):]
  return name


def _RenderCall(name, call_args):
  display = _DisplayName(name)
  if not call_args:
    return display
  return '%s(%s)' % (display, ', '.join(str(arg) for arg in call_args))


class Wildcard(object):
  """Marks an argument position that matches any actual value.

  Returned by IsAny() for use inside setup and verify expressions.
  """

  def __repr__(self):
    return '<IsAny>'


def IsAny():
  """Return the wildcard marker.

    hypermock.Setup(mock, lambda p: p.Save(hypermock.IsAny())).Returns(True)
  """
  return Wildcard()


class ParameterSpec(object):
  """A single matchable argument of an expectation."""

  LITERAL = 'literal'
  WILDCARD = 'wildcard'

  def __init__(self, value, kind=LITERAL):
    self.value = value
    self.kind = kind

  @classmethod
  def FromValue(cls, value):
    """Build a spec from a value evaluated in a setup expression."""
    if isinstance(value, Wildcard):
      return cls(None, cls.WILDCARD)
    return cls(value)

  @property
  def is_wildcard(self):
    return self.kind == self.WILDCARD

  def Matches(self, actual, wildcards=True):
    """Whether actual satisfies this spec.

    Args:
      # actual: The argument passed by the caller.
      # wildcards: Whether a wildcard spec matches; False makes wildcard specs
      #   never match.
      actual: any object
      wildcards: bool
    """
    if self.is_wildcard:
      return wildcards
    return bool(self.value == actual)

  def __repr__(self):
    if self.is_wildcard:
      return 'IsAny()'
    return repr(self.value)


class InvocationRecord(object):
  """One registered expectation of a mock.

  A record pairs a member name and an ordered argument pattern with the
  outcome a matching call produces, and counts the matching calls. Its
  outcome is either nothing, a return value (which may be a SettledTask) or
  an exception; assigning one replaces the other.
  """

  is_event = False

  def __init__(self, name, parameters=(), visit_count=0):
    """Create a record.

    Args:
      # name: Canonical member name: the method name, 'get_X'/'set_X' for
      #   property accessors or 'add_X'/'remove_X' for event accessors.
      # parameters: The argument pattern, one spec per position.
      # visit_count: Number of calls already matched.
      name: str
      parameters: [ParameterSpec]
      visit_count: int
    """
    self.name = name
    self.parameters = list(parameters)
    self.return_value = None
    self.exception = None
    self.visit_count = visit_count

  def IsMatchFor(self, call_args, wildcards=True):
    """Whether the actual arguments satisfy this record's parameters.

    The arity must be equal and every position must match. A record without
    parameters matches a call without arguments.
    """
    if len(call_args) != len(self.parameters):
      return False
    for spec, actual in zip(self.parameters, call_args):
      if not spec.Matches(actual, wildcards):
        return False
    return True

  def HasWildcards(self):
    return any(spec.is_wildcard for spec in self.parameters)

  def SetReturnValue(self, value):
    self.return_value = value
    self.exception = None

  def SetException(self, exception):
    self.return_value = None
    self.exception = exception

  def Visit(self):
    self.visit_count += 1

  def __str__(self):
    params = ', '.join(repr(spec) for spec in self.parameters)
    if self.exception is not None:
      outcome = 'raise %r' % (self.exception,)
    else:
      outcome = repr(self.return_value)
    return '%s(%s) -> %s' % (self.name, params, outcome)

  def __repr__(self):
    return '<%s %s>' % (type(self).__name__, self)


class EventRecord(InvocationRecord):
  """A captured event subscription.

  The handler passed to the first add/remove call of an accessor is kept as
  the single literal parameter. Later calls on the same accessor are ignored,
  so only one subscriber per accessor is observable.
  """

  is_event = True

  def __init__(self, name, handler):
    InvocationRecord.__init__(self, name, [ParameterSpec(handler)],
                              visit_count=1)

  @property
  def handler(self):
    return self.parameters[0].value

  def Handlers(self):
    """Return the callables of the captured handler in subscription order.

    A handler may be one callable, a list or tuple of callables, or an
    EventHandlers collection.
    """
    handler = self.handler
    if handler is None:
      return []
    if isinstance(handler, (list, tuple, EventHandlers)):
      return list(handler)
    return [handler]


class ExpectationRegistry(object):
  """The ordered expectations of one mock.

  Records are never merged, deduplicated or removed; registration order is
  the tie-break whenever several records match.
  """

  def __init__(self):
    self._records = []

  def __len__(self):
    return len(self._records)

  def __iter__(self):
    return iter(self._records)

  def Register(self, record):
    """Append record and return it for further configuration."""
    self._records.append(record)
    logger.debug('Registered %s', record)
    return record

  def FindByArgs(self, name, call_args, wildcards=True):
    """Return the first record for name whose parameters match call_args.

    Args:
      # name: Canonical member name.
      # call_args: Actual arguments in positional order.
      # wildcards: Whether wildcard parameters may match.
      name: str
      call_args: sequence
      wildcards: bool

    Returns:
      InvocationRecord or None.
    """
    for record in self._records:
      if record.name == name and record.IsMatchFor(call_args, wildcards):
        return record
    return None

  def FindByReturnValue(self, name, value):
    """Return the first record for name configured to return value."""
    for record in self._records:
      if record.name == name and record.return_value == value:
        return record
    return None

  def FindEvent(self, name):
    """Return the captured subscription for an event accessor name."""
    for record in self._records:
      if record.is_event and record.name == name:
        return record
    return None


class SettledTask(object):
  """An awaitable whose outcome is already decided.

  Awaiting never suspends: it returns the result, raises the failure, or
  raises asyncio.CancelledError for a canceled task. A settled task can be
  awaited any number of times and needs no event loop to exist. It answers
  done(), cancelled(), result(), exception() and add_done_callback() like a
  finished asyncio.Future, but it is not one: asyncio.isfuture() is False.
  """

  COMPLETED = 'completed'
  CANCELED = 'canceled'
  FAILED = 'failed'

  def __init__(self, state, result=None, exception=None):
    self._state = state
    self._result = result
    self._exception = exception

  @classmethod
  def Completed(cls, result=None):
    return cls(cls.COMPLETED, result=result)

  @classmethod
  def Canceled(cls):
    return cls(cls.CANCELED)

  @classmethod
  def Failed(cls, exception):
    return cls(cls.FAILED, exception=exception)

  def done(self):
    return True

  def cancelled(self):
    return self._state == self.CANCELED

  def add_done_callback(self, fn, context=None):
    """Call fn with this task straight away; the task is already done."""
    fn(self)

  def result(self):
    if self._state == self.CANCELED:
      raise asyncio.CancelledError()
    if self._state == self.FAILED:
      raise self._exception
    return self._result

  def exception(self):
    if self._state == self.CANCELED:
      raise asyncio.CancelledError()
    return self._exception

  def __await__(self):
    yield from ()
    return self.result()

  def __repr__(self):
    return '<SettledTask %s>' % self._state


def _CheckException(exception):
  """Return an exception instance for an exception instance or class.

  Raises:
    MockUsageError: exception is None or not an exception.
  """
  if exception is None:
    raise MockUsageError('An exception is required, got None.')
  if isinstance(exception, type) and issubclass(exception, BaseException):
    return exception()
  if not isinstance(exception, BaseException):
    raise MockUsageError('%r is not an exception.' % (exception,))
  return exception


class VoidBehaviour(object):
  """Configures an expectation for a member that produces no result."""

  def __init__(self, record):
    self._record = record

  def Throws(self, exception):
    """Make matching calls raise exception.

    Args:
      # exception: An exception instance, or an exception class that is
      #   instantiated without arguments.
      exception: BaseException or exception class

    Raises:
      MockUsageError: exception is None or not an exception.
    """
    self._record.SetException(_CheckException(exception))


class ReturnBehaviour(VoidBehaviour):
  """Configures an expectation for a member that returns a value."""

  def Returns(self, value):
    """Make matching calls return value."""
    self._record.SetReturnValue(value)


class _AsyncBehaviour(object):

  def __init__(self, record):
    self._record = record

  def Cancels(self):
    """Make matching calls return a canceled task."""
    self._record.SetReturnValue(SettledTask.Canceled())

  def FailsWith(self, exception):
    """Make matching calls return a task that fails with exception.

    Args:
      # exception: An exception instance, or an exception class that is
      #   instantiated without arguments.
      exception: BaseException or exception class

    Raises:
      MockUsageError: exception is None or not an exception.
    """
    self._record.SetReturnValue(SettledTask.Failed(_CheckException(exception)))


class AsyncVoidBehaviour(_AsyncBehaviour):
  """Configures an expectation for an awaitable member without a value."""

  def Completes(self):
    """Make matching calls return a task that completes without a value."""
    self._record.SetReturnValue(SettledTask.Completed())


class AsyncReturnBehaviour(_AsyncBehaviour):
  """Configures an expectation for an awaitable member with a value."""

  def CompletesWith(self, value):
    """Make matching calls return a task that completes with value."""
    self._record.SetReturnValue(SettledTask.Completed(value))


_VOID = 'void'
_RETURN = 'return'
_ASYNC_VOID = 'async void'
_ASYNC_RETURN = 'async return'

_BEHAVIOURS = {
    _VOID: VoidBehaviour,
    _RETURN: ReturnBehaviour,
    _ASYNC_VOID: AsyncVoidBehaviour,
    _ASYNC_RETURN: AsyncReturnBehaviour,
}

_AWAITABLE_TYPES = (collections.abc.Awaitable, collections.abc.Coroutine,
                    asyncio.Future)


def _ReturnAnnotation(function):
  try:
    annotation = inspect.signature(function).return_annotation
  except (TypeError, ValueError):
    return inspect.Signature.empty
  if isinstance(annotation, str):
    try:
      return typing.get_type_hints(function).get('return', annotation)
    except (NameError, TypeError):
      return annotation
  return annotation


def _IsNone(annotation):
  return annotation is None or annotation is type(None) or annotation == 'None'


def _MemberShape(function):
  """Classify a member by whether it is awaitable and produces a value.

  Coroutine functions and members annotated to return an Awaitable,
  Coroutine or Future are awaitable; a None result annotation (or None as the
  awaited type) means no value. Members without annotations produce a value.
  """
  if function is None:
    return _RETURN
  annotation = _ReturnAnnotation(function)
  if inspect.iscoroutinefunction(function):
    return _ASYNC_VOID if _IsNone(annotation) else _ASYNC_RETURN
  origin = typing.get_origin(annotation) or annotation
  if isinstance(origin, type) and issubclass(origin, _AWAITABLE_TYPES):
    type_args = typing.get_args(annotation)
    if type_args and _IsNone(type_args[-1]):
      return _ASYNC_VOID
    return _ASYNC_RETURN
  if _IsNone(annotation):
    return _VOID
  return _RETURN


def _BehaviourFor(function, record):
  return _BEHAVIOURS[_MemberShape(function)](record)


class MethodSignatureChecker(object):
  """Binds call arguments to a member's signature.

  Positional and keyword spellings of the same call are normalised to one
  ordered tuple, so an expectation matches however the caller spelled the
  call. Defaults are not filled in: the supplied arguments define the arity.
  """

  def __init__(self, method, bound=True):
    """Creates a checker.

    Args:
      # method: The function declared by the mocked class.
      # bound: Whether the first parameter receives the instance or class.
      method: function
      bound: bool
    """
    try:
      signature = inspect.signature(method)
    except (TypeError, ValueError):
      signature = None
    if signature is not None and bound:
      parameters = list(signature.parameters.values())[1:]
      signature = signature.replace(parameters=parameters)
    self._signature = signature

  def Normalize(self, args, kwargs):
    """Return the arguments of a call as one positional tuple.

    Extra positional arguments are flattened in place; extra keyword
    arguments are kept as one dict.

    Raises:
      TypeError: the arguments do not fit the signature.
    """
    if self._signature is None:
      if kwargs:
        raise TypeError('Keyword arguments cannot be bound for this member.')
      return tuple(args)
    bound = self._signature.bind(*args, **kwargs)
    normalized = []
    for name, value in bound.arguments.items():
      kind = self._signature.parameters[name].kind
      if kind == inspect.Parameter.VAR_POSITIONAL:
        normalized.extend(value)
      else:
        normalized.append(value)
    return tuple(normalized)


# Special methods routed to the dispatcher when the mocked class defines them.
_SPECIAL_METHODS = frozenset(['__call__', '__getitem__', '__setitem__',
                              '__contains__', '__iter__', '__len__'])


class Interface(object):
  """The members of a mocked class, classified.

  Members are read with inspect.getattr_static, so properties, events and
  other descriptors of the class are inspected without being invoked.
  """

  METHOD = 'method'
  PROPERTY = 'property'
  EVENT = 'event'
  ATTRIBUTE = 'attribute'

  def __init__(self, class_to_mock):
    self.cls = class_to_mock
    self.name = class_to_mock.__name__
    self._members = {}
    self._checkers = {}
    for name in dir(class_to_mock):
      if _IsDunder(name) and name not in _SPECIAL_METHODS:
        continue
      member = inspect.getattr_static(class_to_mock, name)
      self._members[name] = self._Classify(member)

  @classmethod
  def _Classify(cls, member):
    if isinstance(member, Event):
      return cls.EVENT
    if isinstance(member, property):
      return cls.PROPERTY
    if isinstance(member, (staticmethod, classmethod)) or callable(member):
      return cls.METHOD
    return cls.ATTRIBUTE

  def Kind(self, name):
    """Return the member kind of name, or None if it is not declared."""
    return self._members.get(name)

  def Constants(self):
    """Return the plain class attributes by name."""
    return dict((name, inspect.getattr_static(self.cls, name))
                for name, kind in self._members.items()
                if kind == self.ATTRIBUTE)

  def Function(self, name):
    """Return (function, bound) for a method member."""
    member = inspect.getattr_static(self.cls, name)
    if isinstance(member, staticmethod):
      return member.__func__, False
    if isinstance(member, classmethod):
      return member.__func__, True
    return member, inspect.isfunction(member)

  def Checker(self, name):
    checker = self._checkers.get(name)
    if checker is None:
      function, bound = self.Function(name)
      checker = self._checkers[name] = MethodSignatureChecker(function, bound)
    return checker

  def Getter(self, name):
    return inspect.getattr_static(self.cls, name).fget

  def IsWritable(self, name):
    return (self.Kind(name) == self.PROPERTY and
            inspect.getattr_static(self.cls, name).fset is not None)

  def IsPropertySetter(self, accessor_name):
    prefix, _, name = accessor_name.partition('_')
    return prefix == 'set' and self.Kind(name) == self.PROPERTY

  def IsEventAccessor(self, accessor_name):
    prefix, _, name = accessor_name.partition('_')
    return prefix in ('add', 'remove') and self.Kind(name) == self.EVENT


class MockDispatcher(object):
  """Resolves the intercepted invocations of one mock.

  The dispatcher owns the mock's ExpectationRegistry. Every member use of the
  mock arrives at Intercept under its canonical name.
  """

  def __init__(self, interface):
    self.interface = interface
    self.registry = ExpectationRegistry()

  def Intercept(self, name, call_args):
    """Resolve an intercepted invocation to its configured outcome.

    Args:
      # name: Canonical member name, e.g. 'Save', 'get_Help' or 'add_Hot'.
      # call_args: Actual arguments in positional order.
      name: str
      call_args: sequence

    Returns:
      The return value configured on the matching expectation.

    Raises:
      UnmockedCallError: no expectation matches and the call is not a
        property write.
      The exception configured on the matching expectation, if any.
    """
    call_args = tuple(call_args)
    if self.interface.IsEventAccessor(name):
      self._CaptureSubscription(name, call_args)
      return None

    is_setter = self.interface.IsPropertySetter(name)
    record = self.registry.FindByArgs(name, call_args)
    if record is None:
      if is_setter:
        self._CaptureWrite(name, call_args)
        return None
      raise UnmockedCallError(name, call_args)

    record.Visit()
    logger.debug('Dispatched %s%r to %s', name, call_args, record)
    if record.exception is not None:
      raise record.exception
    if is_setter and record.HasWildcards():
      # The SetupSet record absorbed the write; keep the exact value too.
      self._CaptureWrite(name, call_args)
    return record.return_value

  def _CaptureSubscription(self, name, call_args):
    if self.registry.FindEvent(name) is not None:
      return
    handler = call_args[0] if call_args else None
    self.registry.Register(EventRecord(name, handler))

  def _CaptureWrite(self, name, call_args):
    record = self.registry.FindByArgs(name, call_args, wildcards=False)
    if record is None:
      self.registry.Register(
          InvocationRecord(name, [ParameterSpec(call_args[0])], visit_count=1))
    else:
      record.Visit()


class EventSimulator(object):
  """Replays the captured event subscriptions of one mock."""

  def __init__(self, registry, source):
    """Creates a simulator.

    Args:
      # registry: The registry holding the captured subscriptions.
      # source: The object passed to handlers as the event sender.
      registry: ExpectationRegistry
      source: MockObject
    """
    self._registry = registry
    self._source = source

  def RaiseEvent(self, name, event_data):
    """Call the handler captured for accessor name with event_data.

    Does nothing if nothing was captured for name or the handler is None.
    """
    record = self._registry.FindEvent(name)
    if record is None or record.handler is None:
      logger.debug('No subscription captured for %s', name)
      return
    for handler in record.Handlers():
      handler(self._source, event_data)
    record.Visit()


class Occurrence(object):
  """Base class for policies on how often an expectation was met."""

  def __init__(self, count):
    if count < 0:
      raise ValueError('count must not be negative, got %d' % count)
    self.count = count

  def Assert(self, actual_count):
    """Raise VerificationError unless actual_count satisfies the policy."""
    raise NotImplementedError('method must be implemented by a subclass.')


class ExactOccurrence(Occurrence):
  """The expectation was met exactly count times."""

  def Assert(self, actual_count):
    if actual_count != self.count:
      raise VerificationError('Verification mismatch: Expected %d; Actual %d'
                              % (self.count, actual_count),
                              self.count, actual_count)

  def __repr__(self):
    return 'Exactly(%d)' % self.count


class AtLeastOccurrence(Occurrence):
  """The expectation was met count times or more."""

  def Assert(self, actual_count):
    if actual_count < self.count:
      raise VerificationError(
          'Verification mismatch: Expected at least %d; Actual %d'
          % (self.count, actual_count), self.count, actual_count)

  def __repr__(self):
    return 'AtLeast(%d)' % self.count


def Once():
  return ExactOccurrence(1)


def Never():
  return ExactOccurrence(0)


def Exactly(count):
  return ExactOccurrence(count)


def AtLeast(count):
  return AtLeastOccurrence(count)


class Verifier(object):
  """Checks the recorded usage of one mock."""

  def __init__(self, registry):
    self._registry = registry

  def VerifyInvocation(self, name, call_args, occurrence):
    """Apply occurrence to the first expectation matching the call.

    Without a matching expectation only a count of zero passes.

    Raises:
      VerificationError: the recorded usage does not satisfy occurrence.
    """
    record = self._registry.FindByArgs(name, call_args)
    if record is None:
      if occurrence.count > 0:
        raise VerificationError(
            'Unable to verify that the action occurred %d %s.'
            % (occurrence.count, 'time' if occurrence.count == 1 else 'times'),
            occurrence.count, 0)
      return
    occurrence.Assert(record.visit_count)

  def VerifyRead(self, name, value):
    """Check that a getter configured to return value was invoked."""
    record = self._registry.FindByReturnValue(name, value)
    if record is None or record.visit_count == 0:
      raise VerificationError(
          'Unable to verify that the value %r was returned on the property.'
          % (value,))

  def VerifyWrite(self, name, value):
    """Check that value itself was written through the setter name."""
    record = self._registry.FindByArgs(name, (value,), wildcards=False)
    if record is None or record.visit_count == 0:
      raise VerificationError(
          'Unable to verify that the value %r was set on the property.'
          % (value,))


class MockMethod(object):
  """Callable standing in for one method of a mock."""

  def __init__(self, name, dispatcher):
    self.__name__ = name
    self._name = name
    self._dispatcher = dispatcher

  def __call__(self, *args, **kwargs):
    checker = self._dispatcher.interface.Checker(self._name)
    return self._dispatcher.Intercept(self._name,
                                      checker.Normalize(args, kwargs))

  def __repr__(self):
    return '<MockMethod %s>' % self._name


class EventAccessor(object):
  """Subscription surface of one event of a mock.

  Supports the += and -= spellings used on Event members of real objects as
  well as explicit add() and remove() calls.
  """

  def __init__(self, name, dispatcher):
    self.name = name
    self._dispatcher = dispatcher

  def add(self, handler):
    self._dispatcher.Intercept(_AdderName(self.name), (handler,))

  def remove(self, handler):
    self._dispatcher.Intercept(_RemoverName(self.name), (handler,))

  def __iadd__(self, handler):
    self.add(handler)
    return self

  def __isub__(self, handler):
    self.remove(handler)
    return self

  def __repr__(self):
    return '<EventAccessor %s>' % self.name


class MockObject(object):
  """A mock standing in for an instance of a class.

  Every member use is routed to the mock's MockDispatcher: methods by name,
  property reads and writes as 'get_X'/'set_X', event subscriptions as
  'add_X'/'remove_X'. The mock passes isinstance checks for the mocked class.
  """

  def __init__(self, class_to_mock, attrs=None):
    """Initialize a mock object.

    Args:
      # class_to_mock: The class whose members the mock provides.
      # attrs: Extra plain attributes to expose on the mock.
      class_to_mock: class
      attrs: dict of attribute names to values

    Raises:
      MockUsageError: class_to_mock is not a class.
      PrivateAttributeError: an attrs name is private.
      ValueError: an attrs name is a member of class_to_mock.
    """
    if not inspect.isclass(class_to_mock):
      raise MockUsageError('Only classes can be mocked, got %r.'
                           % (class_to_mock,))
    interface = Interface(class_to_mock)
    known_vars = interface.Constants()
    for name, value in (attrs or {}).items():
      if name.startswith('_'):
        raise PrivateAttributeError(name)
      if interface.Kind(name) not in (None, Interface.ATTRIBUTE):
        raise ValueError("'%s' is a member of %s and cannot be replaced by an "
                         "attribute." % (name, interface.name))
      known_vars[name] = value
    object.__setattr__(self, '_dispatcher', MockDispatcher(interface))
    object.__setattr__(self, '_known_vars', known_vars)

  @property
  def __class__(self):
    """Return the class that is being mocked."""
    return self._dispatcher.interface.cls

  def __getattr__(self, name):
    """Intercept member access on this mock.

    Raises:
      UnknownMemberError: name is not declared by the mocked class.
    """
    if name in ('_dispatcher', '_known_vars'):
      raise AttributeError(name)
    known_vars = self._known_vars
    if name in known_vars:
      return known_vars[name]
    dispatcher = self._dispatcher
    kind = dispatcher.interface.Kind(name)
    if kind == Interface.METHOD:
      return MockMethod(name, dispatcher)
    if kind == Interface.PROPERTY:
      return dispatcher.Intercept(_GetterName(name), ())
    if kind == Interface.EVENT:
      return EventAccessor(name, dispatcher)
    if _IsDunder(name):
      raise AttributeError(name)
    raise UnknownMemberError(name, dispatcher.interface.name)

  def __setattr__(self, name, value):
    dispatcher = self._dispatcher
    interface = dispatcher.interface
    kind = interface.Kind(name)
    if kind == Interface.PROPERTY:
      if not interface.IsWritable(name):
        raise AttributeError("Property '%s' of %s has no setter."
                             % (name, interface.name))
      dispatcher.Intercept(_SetterName(name), (value,))
      return
    if (kind == Interface.EVENT and isinstance(value, EventAccessor) and
        value.name == name):
      # Rebinding after += or -=; the accessor already dispatched the call.
      return
    raise AttributeError("Cannot set '%s' on a mock of %s."
                         % (name, interface.name))

  def _SpecialMethod(self, name):
    dispatcher = self._dispatcher
    if dispatcher.interface.Kind(name) != Interface.METHOD:
      raise TypeError('%s does not define %s'
                      % (dispatcher.interface.name, name))
    return MockMethod(name, dispatcher)

  def __call__(self, *args, **kwargs):
    return self._SpecialMethod('__call__')(*args, **kwargs)

  def __getitem__(self, key):
    return self._SpecialMethod('__getitem__')(key)

  def __setitem__(self, key, value):
    self._SpecialMethod('__setitem__')(key, value)

  def __contains__(self, item):
    return bool(self._SpecialMethod('__contains__')(item))

  def __iter__(self):
    return iter(self._SpecialMethod('__iter__')())

  def __len__(self):
    return self._SpecialMethod('__len__')()

  def __bool__(self):
    return True

  def __repr__(self):
    return '<MockObject of %s>' % self._dispatcher.interface.name


class _CallReference(object):
  """A member invocation captured by an ExpressionRecorder."""

  def __init__(self, name, call_args, is_accessor=False):
    self.name = name
    self.call_args = call_args
    self.is_accessor = is_accessor


class _MemberReference(object):
  """A bare member read captured by an ExpressionRecorder."""

  def __init__(self, name, kind):
    self.name = name
    self.kind = kind


class _MethodReference(object):

  def __init__(self, recorder, name):
    self._recorder = recorder
    self._name = name

  def __call__(self, *args, **kwargs):
    return self._recorder._Call(self._name, args, kwargs)


class _EventReference(_MemberReference):

  def __init__(self, recorder, name):
    _MemberReference.__init__(self, name, Interface.EVENT)
    self._recorder = recorder

  def add(self, handler):
    return self._recorder._Subscribe(_AdderName(self.name), handler)

  def remove(self, handler):
    return self._recorder._Subscribe(_RemoverName(self.name), handler)


class ExpressionRecorder(object):
  """Stands in for a mocked class while a setup or verify lambda runs.

  Evaluating lambda p: p.Save('Homer', IsAny()) against a recorder yields a
  reference naming the member and holding the evaluated arguments instead of
  invoking anything. The last event accessor referenced is remembered for
  Raise().
  """

  def __init__(self, interface):
    self._interface = interface
    self._accessor = None

  def __getattr__(self, name):
    if name in ('_interface', '_accessor'):
      raise AttributeError(name)
    interface = self._interface
    kind = interface.Kind(name)
    if kind == Interface.METHOD:
      return _MethodReference(self, name)
    if kind == Interface.EVENT:
      self._accessor = _AdderName(name)
      return _EventReference(self, name)
    if kind is not None:
      return _MemberReference(name, kind)
    if _IsDunder(name):
      raise AttributeError(name)
    raise UnknownMemberError(name, interface.name)

  def __call__(self, *args, **kwargs):
    return self._Call('__call__', args, kwargs)

  def __getitem__(self, key):
    return self._Call('__getitem__', (key,), {})

  def _Call(self, name, args, kwargs):
    interface = self._interface
    if interface.Kind(name) != Interface.METHOD:
      raise TypeError('%s does not define %s' % (interface.name, name))
    return _CallReference(name, interface.Checker(name).Normalize(args, kwargs))

  def _Subscribe(self, accessor, handler):
    self._accessor = accessor
    return _CallReference(accessor, (handler,), is_accessor=True)


def _ResolveCall(interface, expression):
  """Return (name, args) of the method call made by expression."""
  reference = expression(ExpressionRecorder(interface))
  if not isinstance(reference, _CallReference) or reference.is_accessor:
    raise MockUsageError('Expected an expression calling a method of %s, '
                         'e.g. lambda p: p.Save("Homer").' % interface.name)
  return reference.name, reference.call_args


def _ResolveProperty(interface, expression):
  """Return the name of the property read by expression."""
  reference = expression(ExpressionRecorder(interface))
  if (not isinstance(reference, _MemberReference) or
      reference.kind != Interface.PROPERTY):
    raise MockUsageError('Expected an expression reading a property of %s, '
                         'e.g. lambda p: p.Help.' % interface.name)
  return reference.name


def _ResolveEventAccessor(interface, expression):
  """Return the accessor name of the event referenced by expression."""
  recorder = ExpressionRecorder(interface)
  expression(recorder)
  if recorder._accessor is None:
    raise MockUsageError('Expected an expression referencing an event of %s, '
                         'e.g. lambda p: p.Hot.' % interface.name)
  return recorder._accessor


def _GetDispatcher(mock_object):
  if not isinstance(mock_object, MockObject):
    raise MockUsageError('Unable to get the dispatcher from %r; it is not a '
                         'mock object.' % (mock_object,))
  return object.__getattribute__(mock_object, '_dispatcher')


def _CheckOccurrence(occurrence):
  if not isinstance(occurrence, Occurrence):
    raise MockUsageError('Expected an occurrence such as Once() or '
                         'AtLeast(2), got %r.' % (occurrence,))


def CreateMock(class_to_mock, attrs=None):
  """Create a mock of class_to_mock.

  Args:
    # class_to_mock: The class to mock, usually an abc.ABC.
    # attrs: Extra plain attributes to expose on the mock.
    class_to_mock: class
    attrs: dict of attribute names to values

  Returns:
    MockObject
  """
  return MockObject(class_to_mock, attrs)


def Setup(mock_object, expression):
  """Register an expectation for a method call.

  Args:
    # mock_object: The mock to configure.
    # expression: A lambda calling one method of the mock, with literal or
    #   IsAny() arguments, e.g. lambda p: p.Save('Homer', IsAny()).
    mock_object: MockObject
    expression: callable

  Returns:
    The behaviour for the method's shape: VoidBehaviour for '-> None',
    AsyncVoidBehaviour or AsyncReturnBehaviour for awaitable members, and
    ReturnBehaviour otherwise.
  """
  dispatcher = _GetDispatcher(mock_object)
  name, call_args = _ResolveCall(dispatcher.interface, expression)
  record = dispatcher.registry.Register(InvocationRecord(
      name, [ParameterSpec.FromValue(value) for value in call_args]))
  function, _ = dispatcher.interface.Function(name)
  return _BehaviourFor(function, record)


def SetupGet(mock_object, expression):
  """Register an expectation for reading a property.

    hypermock.SetupGet(mock, lambda p: p.Help).Returns('Some help')

  Returns:
    The behaviour for the getter's shape, usually ReturnBehaviour.
  """
  dispatcher = _GetDispatcher(mock_object)
  name = _ResolveProperty(dispatcher.interface, expression)
  record = dispatcher.registry.Register(InvocationRecord(_GetterName(name)))
  return _BehaviourFor(dispatcher.interface.Getter(name), record)


def SetupSet(mock_object, expression):
  """Register an expectation for writing a property with any value.

  Writes are accepted without setup as well; this is needed only to make
  writes raise.

    hypermock.SetupSet(mock, lambda p: p.CurrentRole).Throws(PermissionError)

  Returns:
    VoidBehaviour

  Raises:
    MockUsageError: the property has no setter.
  """
  dispatcher = _GetDispatcher(mock_object)
  name = _ResolveProperty(dispatcher.interface, expression)
  if not dispatcher.interface.IsWritable(name):
    raise MockUsageError("Property '%s' of %s has no setter."
                         % (name, dispatcher.interface.name))
  record = dispatcher.registry.Register(InvocationRecord(
      _SetterName(name), [ParameterSpec(None, ParameterSpec.WILDCARD)]))
  return VoidBehaviour(record)


def Verify(mock_object, expression, occurrence):
  """Verify how often a method was called with the given arguments.

    hypermock.Verify(mock, lambda p: p.Delete('Homer'), hypermock.AtLeast(2))

  Raises:
    VerificationError: the recorded calls do not satisfy occurrence.
  """
  dispatcher = _GetDispatcher(mock_object)
  _CheckOccurrence(occurrence)
  name, call_args = _ResolveCall(dispatcher.interface, expression)
  Verifier(dispatcher.registry).VerifyInvocation(name, call_args, occurrence)


def VerifyGet(mock_object, expression, expected_value):
  """Verify that a getter set up to return expected_value was read.

  Raises:
    VerificationError: no such getter was read.
  """
  dispatcher = _GetDispatcher(mock_object)
  name = _ResolveProperty(dispatcher.interface, expression)
  Verifier(dispatcher.registry).VerifyRead(_GetterName(name), expected_value)


def VerifySet(mock_object, expression, expected_value):
  """Verify that expected_value was written to a property at least once.

  Raises:
    VerificationError: the value was never written.
  """
  dispatcher = _GetDispatcher(mock_object)
  name = _ResolveProperty(dispatcher.interface, expression)
  Verifier(dispatcher.registry).VerifyWrite(_SetterName(name), expected_value)


def Raise(mock_object, expression, event_data=None):
  """Trigger the handler the code under test subscribed to an event.

  The expression only names the event: lambda p: p.Hot selects the handler
  captured by 'mock.Hot += handler', lambda p: p.Hot.remove(None) the one
  passed to 'mock.Hot -= handler'. Handlers are called with the mock and
  event_data. Nothing happens if no handler was captured.
  """
  dispatcher = _GetDispatcher(mock_object)
  name = _ResolveEventAccessor(dispatcher.interface, expression)
  EventSimulator(dispatcher.registry, mock_object).RaiseEvent(name, event_data)


class EventHandlers(object):
  """The handlers subscribed to one event of one object."""

  def __init__(self, sender):
    self._sender = sender
    self._handlers = []

  def add(self, handler):
    self._handlers.append(handler)

  def remove(self, handler):
    if handler in self._handlers:
      self._handlers.remove(handler)

  def __iadd__(self, handler):
    self.add(handler)
    return self

  def __isub__(self, handler):
    self.remove(handler)
    return self

  def __iter__(self):
    return iter(list(self._handlers))

  def __len__(self):
    return len(self._handlers)

  def Fire(self, event_data=None):
    """Call every subscribed handler with the sender and event_data."""
    for handler in self:
      handler(self._sender, event_data)


class Event(object):
  """Declares an event member of a class.

    class ThermostatService(abc.ABC):
      Hot = hypermock.Event()

  On instances the attribute is an EventHandlers collection: subscribers
  attach with += and detach with -=, and the owner calls Fire(). Mocks of the
  class capture subscriptions instead.
  """

  def __init__(self):
    self.name = None

  def __set_name__(self, owner, name):
    self.name = name

  def __get__(self, instance, owner=None):
    if instance is None:
      return self
    handlers = instance.__dict__.get(self.name)
    if handlers is None:
      handlers = instance.__dict__[self.name] = EventHandlers(instance)
    return handlers

  def __set__(self, instance, value):
    if value is not instance.__dict__.get(self.name):
      raise AttributeError("Event '%s' can only be changed with += and -=."
                           % self.name)
