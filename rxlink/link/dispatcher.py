"""Serialized delivery of link events to the consumer.

All events are handed to a single :class:`reactivex.scheduler.EventLoopScheduler`
thread, so consumer handlers never run concurrently with each other and
each producer's events arrive in the order they were posted.
"""

import threading

from reactivex import Observable
from reactivex.scheduler import EventLoopScheduler
from reactivex.subject import Subject

from .._otel_mixin import OTelLoggingMixin
from ..telemetry.logger import OTelLogger
from ..utils import get_full_error_info
from .events import LinkCallback, LinkEvent, dispatch_to_callback


class EventDispatcher(OTelLoggingMixin):
    """Fire-and-forget event delivery on one serialized context.

    Events reach every subscriber of :attr:`events` and the callback set
    with :meth:`set_callback`. With neither present an event is dropped at
    delivery time; nothing is queued for late consumers.

    Parameters
    ----------
    scheduler : EventLoopScheduler | None
        Delivery thread. Defaults to a private ``EventLoopScheduler``
        which is shut down by :meth:`dispose`. A caller-supplied one is
        left running. Any other scheduler kind is rejected, since it
        could run handlers concurrently.
    logger : OTelLogger | None
        Logger for handler failures.
    """

    def __init__(
        self,
        scheduler: EventLoopScheduler | None = None,
        logger: OTelLogger | None = None,
    ):
        if scheduler is not None and not isinstance(scheduler, EventLoopScheduler):
            raise TypeError(
                f"scheduler must be an EventLoopScheduler, got {type(scheduler).__name__}"
            )
        self._owns_scheduler = scheduler is None
        self._scheduler: EventLoopScheduler = scheduler or EventLoopScheduler()
        self._logger = logger
        self._subject: Subject[LinkEvent] = Subject()
        self._callback: LinkCallback | None = None
        self._lock = threading.Lock()
        self._disposed = False
        self._delivery_thread: int | None = None

    @property
    def events(self) -> Observable[LinkEvent]:
        """Observable of every delivered event."""
        return self._subject

    def set_callback(self, callback: LinkCallback | None) -> None:
        """Register (or, with None, remove) the consumer callback."""
        self._callback = callback

    def post(self, event: LinkEvent) -> None:
        """Schedule ``event`` for delivery. Never blocks on the consumer."""
        with self._lock:
            if self._disposed:
                return
            self._scheduler.schedule(lambda _scheduler, _state: self._deliver(event))

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every event posted before this call has been delivered.

        Returns False if the timeout expired first.
        """
        if self._delivery_thread == threading.get_ident():
            return True
        done = threading.Event()
        with self._lock:
            if self._disposed:
                return True
            self._scheduler.schedule(lambda _scheduler, _state: done.set())
        return done.wait(timeout)

    def dispose(self, timeout: float | None = 2.0) -> None:
        """Deliver pending events, complete :attr:`events` and shut down."""
        done = threading.Event()

        def _complete(_scheduler, _state):
            try:
                self._subject.on_completed()
            finally:
                done.set()

        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._scheduler.schedule(_complete)

        if self._delivery_thread != threading.get_ident():
            done.wait(timeout)
        if self._owns_scheduler:
            self._scheduler.dispose()

    def _deliver(self, event: LinkEvent) -> None:
        self._delivery_thread = threading.get_ident()

        callback = self._callback
        if callback is not None:
            try:
                dispatch_to_callback(event, callback)
            except Exception as e:
                self._log(
                    f"Consumer callback failed on {event!r}:\n{get_full_error_info(e)}",
                    "ERROR",
                )

        try:
            self._subject.on_next(event)
        except Exception as e:
            self._log(
                f"Event subscriber failed on {event!r}:\n{get_full_error_info(e)}",
                "ERROR",
            )
