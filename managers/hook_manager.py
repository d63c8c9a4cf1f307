from typing import Optional, Callable, Dict, List, Tuple, Any
from threading import Lock
import itertools
import logging

logger = logging.getLogger(__name__)

# Legacy extension points, run before any arguments are built.
PRE_PROCESS_FORM = "pre_process_form"
PROCESS_FORM = "process_form"

# Arguments are passed by reference; callbacks may mutate them.
BEFORE_CUSTOMER = "before_customer_from_payment_form_request"
BEFORE_PAYMENTINTENT = "before_paymentintent_from_payment_form_request"

# Observation only.
AFTER_CUSTOMER = "after_customer_from_payment_form_request"
AFTER_PAYMENTINTENT = "after_paymentintent_from_payment_form_request"
AFTER_PAYMENTINTENT_RESPONSE = "after_paymentintent_response_from_payment_form_request"

Callback = Callable[..., Any]


class HookManager:
    """Ordered registry of callbacks attached to named extension points.

    Callbacks run synchronously, lowest priority first, then in the order
    they were added.
    """
    _instance: Optional['HookManager'] = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._actions = {}
                    instance._counter = itertools.count()
                    cls._instance = instance
        return cls._instance

    def __init__(self):
        pass

    def add_action(self, name: str, callback: Callback, priority: int = 10) -> None:
        with self._lock:
            self._actions.setdefault(name, []).append((priority, next(self._counter), callback))

    def remove_action(self, name: str, callback: Callback) -> bool:
        with self._lock:
            registered = self._actions.get(name, [])
            remaining = [entry for entry in registered if entry[2] is not callback]
            self._actions[name] = remaining
            return len(remaining) != len(registered)

    def remove_all_actions(self, name: Optional[str] = None) -> None:
        with self._lock:
            if name is None:
                self._actions.clear()
            else:
                self._actions.pop(name, None)

    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))

    def _callbacks(self, name: str) -> List[Callback]:
        with self._lock:
            entries: List[Tuple[int, int, Callback]] = sorted(self._actions.get(name, []), key=lambda e: (e[0], e[1]))
        return [entry[2] for entry in entries]

    def do_action(self, name: str, *args: Any) -> None:
        """Run every callback. Exceptions propagate to the caller."""
        for callback in self._callbacks(name):
            callback(*args)

    def notify(self, name: str, *args: Any) -> None:
        """Run every callback; a failing observer is logged and skipped."""
        for callback in self._callbacks(name):
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Observer {getattr(callback, '__name__', callback)!r} failed on {name}")


def get_hook_manager() -> HookManager:
    return HookManager()
