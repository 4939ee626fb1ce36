from typing import Any, Callable, Dict, List

Handler = Callable[..., None]


class EventBus:
    """Pub/sub fan-out for simulation events ("hit", "kill", "join", "leave").

    Handlers run synchronously inside the tick; a failing handler is reported
    and skipped so it cannot abort the rest of the tick.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = {}

    def subscribe(self, event: str, cb: Handler) -> None:
        self._subs.setdefault(event, []).append(cb)

    def unsubscribe(self, event: str, cb: Handler) -> None:
        handlers = self._subs.get(event, [])
        if cb in handlers:
            handlers.remove(cb)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        for cb in list(self._subs.get(event, [])):
            try:
                cb(*args, **kwargs)
            except Exception as exc:
                print(f"[events] handler for {event!r} failed: {exc!r}")
