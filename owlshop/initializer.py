"""
Startup sequencing for producers.

Producers are initialized one after another under a single deadline covering
the whole sequence. Producers exposing ``start()`` are then launched on
daemon threads that nobody waits for.
"""

import logging
import threading
import time
from typing import List, Sequence, Tuple

from owlshop.errors import DeadlineExceeded, StartupError

logger = logging.getLogger("owlshop.initializer")

DEFAULT_STARTUP_TIMEOUT = 60.0


def remaining(deadline: float) -> float:
    """Seconds left until a monotonic deadline, never negative."""
    return max(deadline - time.monotonic(), 0.0)


def _run_with_deadline(name: str, service, deadline: float) -> None:
    """Run one initialize; on timeout the worker is abandoned, not stopped."""
    errors: List[BaseException] = []

    def target():
        try:
            service.initialize(deadline)
        except BaseException as e:  # re-raised on the caller's thread
            errors.append(e)

    worker = threading.Thread(target=target, name=f"init-{name}", daemon=True)
    worker.start()
    worker.join(remaining(deadline))

    if worker.is_alive():
        raise StartupError(name, DeadlineExceeded("startup deadline exceeded"))
    if errors:
        raise StartupError(name, errors[0]) from errors[0]


def initialize_services(services: Sequence[Tuple[str, object]],
                        timeout: float = DEFAULT_STARTUP_TIMEOUT) -> None:
    """Initialize ``(name, service)`` pairs in order; the first failure aborts."""
    deadline = time.monotonic() + timeout
    for name, service in services:
        if remaining(deadline) <= 0:
            raise StartupError(name, DeadlineExceeded("startup deadline exceeded"))
        logger.info("Initializing %s service", name)
        _run_with_deadline(name, service, deadline)
    logger.info("Initialized %d services", len(services))


def _run_background(name: str, service) -> None:
    try:
        service.start()
    except Exception:
        logger.exception("Background task of %s service failed", name)


def start_background(services: Sequence[Tuple[str, object]]) -> List[threading.Thread]:
    """Launch ``start()`` of every service that has one; returns the threads."""
    threads = []
    for name, service in services:
        if not callable(getattr(service, "start", None)):
            continue
        t = threading.Thread(target=_run_background, args=(name, service),
                             name=f"{name}-background", daemon=True)
        t.start()
        logger.info("Started background task of %s service", name)
        threads.append(t)
    return threads
