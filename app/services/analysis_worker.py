# =========================================================
# OFF-THREAD CITY ANALYSIS
# ---------------------------------------------------------
# One persistent worker process builds single-city snapshots.
# Requests are tagged with increasing ids and multiplexed
# over that worker; each caller waits on its own future with
# a timeout. Timeouts, error responses and worker faults tear
# the worker down (rejecting everything in flight) and the
# caller recomputes in-process, so callers never see them.
# =========================================================

import itertools
import threading
from concurrent.futures import (
    BrokenExecutor,
    CancelledError,
    Future,
    ProcessPoolExecutor,
    TimeoutError as FuturesTimeoutError,
)

from app.services.analysis_fallback import build_city_analysis_fallback, normalize_analysis_window
from config.constants import (
    DEFAULT_WINDOW,
    WORKER_MESSAGE_TYPE,
    WORKER_STATUS_ERROR,
    WORKER_STATUS_SUCCESS,
)
from config.logging import logger
from config.settings import settings


class OffthreadComputationError(RuntimeError):
    pass


# =========================================================
# WORKER SIDE
# =========================================================
def handle_worker_message(message):
    """
    Runs inside the worker. Returns a response tagged with the
    request id, or None for messages it does not understand.
    """
    message = message or {}
    request_id = message.get("id")

    if not request_id or message.get("type") != WORKER_MESSAGE_TYPE:
        return None

    try:
        payload = message.get("payload") or {}
        window_key = normalize_analysis_window(payload.get("window_key") or DEFAULT_WINDOW)
        data = build_city_analysis_fallback(payload.get("city_id"), window_key)
        return {"id": request_id, "status": WORKER_STATUS_SUCCESS, "data": data}
    except Exception as e:
        return {
            "id": request_id,
            "status": WORKER_STATUS_ERROR,
            "error": str(e) or "Failed to build city analysis",
        }


def create_worker_pool():
    return ProcessPoolExecutor(max_workers=1)


def terminate_workers(executor, join_timeout: float = 1.0):
    """
    Kill the pool's worker processes, including one busy with a task.
    shutdown() leaves a running task's process alive.
    """
    processes = getattr(executor, "_processes", None) or {}

    for process in list(processes.values()):
        if process.is_alive():
            process.terminate()
            process.join(join_timeout)


# =========================================================
# CALLER SIDE
# =========================================================
class CityAnalysisDispatcher:
    """
    Owns the worker handle and the pending-request table.
    Construct once and share it; the worker is created lazily and
    recreated on the next call after a fault.
    """

    def __init__(
        self,
        timeout: float = None,
        enabled: bool = None,
        executor_factory=create_worker_pool,
        handler=handle_worker_message,
        fallback=build_city_analysis_fallback,
    ):
        self.timeout = settings.offthread_timeout_seconds if timeout is None else timeout
        self.enabled = settings.OFFTHREAD_ENABLED if enabled is None else enabled
        self._executor_factory = executor_factory
        self._handler = handler
        self._fallback = fallback

        self._executor = None
        self._pending = {}
        self._request_ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def is_running(self) -> bool:
        return self._executor is not None

    def _ensure_executor(self):
        if not self.enabled:
            return None

        with self._lock:
            if self._executor is None:
                try:
                    self._executor = self._executor_factory()
                    logger.info("City analysis worker started")
                except (OSError, NotImplementedError, ImportError) as e:
                    logger.warning(f"City analysis worker unavailable: {e}")
                    self._executor = None
            return self._executor

    def reset(self, reason: str = "City analysis worker reset", expected=None):
        """
        Tear the worker down and reject every pending request.
        With `expected`, only acts if that worker is still current.
        """
        with self._lock:
            if expected is not None and self._executor is not expected:
                return
            executor, self._executor = self._executor, None
            pending, self._pending = self._pending, {}

        for future in pending.values():
            if not future.done():
                future.set_exception(OffthreadComputationError(reason))

        if executor is not None:
            terminate_workers(executor)
            executor.shutdown(wait=False, cancel_futures=True)

        logger.warning(f"{reason} | rejected in-flight requests: {len(pending)}")

    def close(self):
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            terminate_workers(executor)
            executor.shutdown(wait=False, cancel_futures=True)

    def _on_task_done(self, executor, task):
        if task.cancelled():
            return

        fault = task.exception()
        if fault is not None:
            self.reset(f"City analysis worker encountered an error: {fault}", expected=executor)
            return

        response = task.result() or {}
        with self._lock:
            future = self._pending.pop(response.get("id"), None)

        if future is None or future.done():
            return

        if response.get("status") == WORKER_STATUS_SUCCESS:
            future.set_result(response.get("data"))
        else:
            future.set_exception(
                OffthreadComputationError(response.get("error") or "City analysis worker failed")
            )

    def build_city_analysis_offthread(self, city_id, window_key) -> dict:
        executor = self._ensure_executor()
        if executor is None:
            return self._fallback(city_id, window_key)

        request_id = next(self._request_ids)
        future = Future()

        with self._lock:
            self._pending[request_id] = future

        message = {
            "id": request_id,
            "type": WORKER_MESSAGE_TYPE,
            "payload": {"city_id": city_id, "window_key": window_key},
        }

        try:
            task = executor.submit(self._handler, message)
            task.add_done_callback(lambda t: self._on_task_done(executor, t))
            return future.result(timeout=self.timeout)

        except FuturesTimeoutError:
            logger.warning(f"City analysis worker timed out | request={request_id} city={city_id}")
            self.reset("City analysis worker timed out", expected=executor)

        except (OffthreadComputationError, CancelledError, BrokenExecutor, RuntimeError) as e:
            logger.warning(f"City analysis worker failed | request={request_id} city={city_id} | {e}")
            self.reset(f"City analysis worker failed: {e}", expected=executor)

        finally:
            with self._lock:
                self._pending.pop(request_id, None)

        return self._fallback(city_id, window_key)
