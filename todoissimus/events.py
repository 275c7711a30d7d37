from enum import Enum, auto
from typing import Callable, Dict, Any, Optional
import inspect
import threading
import uuid
import weakref
import logging

logger = logging.getLogger(__name__)


class AppEvent(Enum):
    """Application-wide events for the observer pattern."""
    ITEMS_LOADED = auto()
    LOAD_FAILED = auto()
    ITEM_CREATED = auto()
    ITEM_COMPLETED = auto()
    SETTINGS_CHANGED = auto()
    # Requests emitted by rows, handled by TaskActionHandler
    ITEM_COMPLETE_REQUESTED = auto()
    ITEM_OPEN_REQUESTED = auto()
    ITEM_PEEK_REQUESTED = auto()


class Subscription:
    """Handle for one subscription; call unsubscribe() when done.

    Subscriptions made with strong=True keep the callback alive through this
    object, so it must be stored by the subscriber.
    """

    def __init__(
        self,
        bus: "EventBus",
        event: AppEvent,
        subscription_id: str,
        strong_ref: Optional[Callable[[Any], None]] = None,
    ):
        self._bus = bus
        self._event = event
        self._id = subscription_id
        self._active = True
        self._strong_ref = strong_ref

    @property
    def id(self) -> str:
        return self._id

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._bus._remove(self._event, self._id)
            self._active = False
            self._strong_ref = None


def _make_ref(callback: Callable[[Any], None], on_dead: Callable[[Any], None]):
    """Weak reference to a bound method or function, strong for builtins."""
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback, on_dead)
    try:
        return weakref.ref(callback, on_dead)
    except TypeError:
        return lambda: callback


class EventBus:
    """Singleton event bus for decoupled component communication.

    Bound methods are held weakly so rows and views that are thrown away on
    re-render drop out of the bus on their own. Lambdas and closures are
    held strongly through their Subscription.
    """
    _instance: Optional["EventBus"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._listeners: Dict[AppEvent, Dict[str, Any]] = {}
        return cls._instance

    def subscribe(
        self,
        event: AppEvent,
        callback: Callable[[Any], None],
        strong: bool = False,
    ) -> Subscription:
        """Subscribe a callback to an event. Returns a Subscription for cleanup.

        Example:
            self._sub = event_bus.subscribe(AppEvent.ITEMS_LOADED, self.on_refresh)
            # Later: self._sub.unsubscribe()
        """
        listeners = self._listeners.setdefault(event, {})
        subscription_id = str(uuid.uuid4())

        is_lambda = getattr(callback, "__name__", "") == "<lambda>"
        is_closure = (
            not inspect.ismethod(callback)
            and getattr(callback, "__closure__", None) is not None
        )
        if (is_lambda or is_closure) and not strong:
            logger.debug(f"EventBus: holding {event.name} callback strongly ({callback!r})")
            strong = True

        def on_dead(_ref) -> None:
            logger.debug(f"EventBus: {event.name} subscriber was garbage collected")
            self._remove(event, subscription_id)

        listeners[subscription_id] = _make_ref(callback, on_dead)
        return Subscription(self, event, subscription_id, callback if strong else None)

    def _remove(self, event: AppEvent, subscription_id: str) -> None:
        if event in self._listeners:
            self._listeners[event].pop(subscription_id, None)

    def emit(self, event: AppEvent, data: Any = None) -> None:
        """Emit an event to all live subscribers.

        A failing handler is logged and does not stop the others.
        """
        for sub_id, ref in list(self._listeners.get(event, {}).items()):
            callback = ref()
            if callback is None:
                self._remove(event, sub_id)
                continue
            try:
                callback(data)
            except Exception:
                logger.exception(f"Error in event handler for {event.name}")

    def subscriber_count(self, event: AppEvent) -> int:
        return len(self._listeners.get(event, {}))

    def clear(self) -> None:
        """Clear all event subscriptions. Used primarily for testing."""
        self._listeners.clear()


event_bus = EventBus()
