"""Domain events, the per-run event collector and event processors."""
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterator,
    List,
    Protocol,
    Tuple,
    TypeVar,
    Union,
    runtime_checkable,
)

from .exceptions import InvalidEventError


T_Event = TypeVar("T_Event")
T_Deps = TypeVar("T_Deps")


@runtime_checkable
class DomainEvent(Protocol):
    """
    Anything with a string `event_name` is a domain event.

    Projects are free to use their own event classes; there is no need to
    inherit from `Event`.
    """

    event_name: str


@dataclass
class Event:
    """
    Optional base dataclass for domain events.

    The event name is a class attribute; it defaults to the class name.

    Usage:
        @dataclass
        class UserAdded(Event):
            event_name: ClassVar[str] = "USER ADDED"
            username: str
    """

    event_name: ClassVar[str]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "event_name" not in cls.__dict__:
            cls.event_name = cls.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Payload plus the event name."""
        return {"event_name": self.event_name, **asdict(self)}


def get_event_name(event: Any) -> str:
    """
    Read the name of a domain event.

    Objects expose it as the `event_name` attribute; mappings as the
    `"event_name"` key.
    """
    if isinstance(event, Mapping):
        name = event.get("event_name")
    else:
        name = getattr(event, "event_name", None)

    if not isinstance(name, str) or not name:
        raise InvalidEventError(event, "event_name must be a non-empty string")
    return name


class EventCollector:
    """
    Ordered accumulator for the events raised during one use case run.

    The collector is handed to the use case handler as its `emit`
    callback. Every call appends a batch of events, keeping call order.

    Usage:
        emit([UserAdded("albo")])
        emit([ProfileCreated("albo"), WelcomeMailQueued("albo")])
    """

    def __init__(self):
        self._events: List[Any] = []

    def __call__(self, events: Iterable[Any]) -> None:
        if isinstance(events, (str, bytes, Mapping)) or not isinstance(
            events, Iterable
        ):
            raise InvalidEventError(events, "emit expects a sequence of events")
        batch = list(events)
        for event in batch:
            get_event_name(event)
        self._events.extend(batch)

    @property
    def events(self) -> Tuple[Any, ...]:
        return tuple(self._events)

    def __iter__(self) -> Iterator[Any]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        names = [get_event_name(event) for event in self._events]
        return f"EventCollector({names!r})"


EventHandlerFunc = Callable[[T_Event, T_Deps], Union[Awaitable[None], None]]


class EventProcessor(Generic[T_Event, T_Deps]):
    """
    Reacts to one kind of domain event.

    Processors are run by the `Mediator` inside the transaction of the use
    case that emitted the event; they are not meant to be called directly.
    The handler may be a coroutine function or a plain function. Any error
    it raises propagates unchanged.

    Usage:
        count_users = EventProcessor(
            "USER ADDED", lambda event, deps: deps.stats.increment("users")
        )
    """

    def __init__(self, event_name: str, handler: EventHandlerFunc):
        if not isinstance(event_name, str) or not event_name:
            raise ValueError("event_name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"Event processor handler for '{event_name}' is not callable")
        self._event_name = event_name
        self._handler = handler

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def handler(self) -> EventHandlerFunc:
        return self._handler

    async def process(self, event: T_Event, deps: T_Deps) -> None:
        result = self._handler(event, deps)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        handler_name = getattr(self._handler, "__qualname__", repr(self._handler))
        return f"EventProcessor({self._event_name!r}, {handler_name})"
