import threading

import structlog
import structlog.testing

from emoji_checker.tasks import InlineRunner, ThreadRunner


def test_inline_runner_runs_job_and_swallows_failure():
    calls: list[str] = []

    def _boom() -> None:
        calls.append("boom")
        raise RuntimeError("upload failed")

    runner = InlineRunner()
    runner.submit("first", lambda: calls.append("ok"))
    runner.submit("second", _boom)

    assert calls == ["ok", "boom"]


def test_thread_runner_runs_jobs_off_thread():
    seen: list[str] = []
    done = threading.Event()

    def _job() -> None:
        seen.append(threading.current_thread().name)
        done.set()

    runner = ThreadRunner(max_workers=1)
    runner.submit("job", _job)
    assert done.wait(timeout=2)
    runner.shutdown()

    assert seen[0].startswith("emoji-checker-job")


def test_thread_runner_failure_does_not_propagate():
    runner = ThreadRunner(max_workers=1)

    def _boom() -> None:
        raise RuntimeError("boom")

    runner.submit("failing", _boom)
    runner.shutdown(wait=True)


def test_thread_runner_carries_log_context_to_job():
    captured = structlog.testing.LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, captured])
    seen: dict[str, object] = {}

    def _boom() -> None:
        seen.update(structlog.contextvars.get_contextvars())
        raise RuntimeError("upload failed")

    structlog.contextvars.bind_contextvars(event_type="app_mention", event_id="Ev1")
    runner = ThreadRunner(max_workers=1)
    try:
        runner.submit("docbase-forward-1234567", _boom)
    finally:
        structlog.contextvars.clear_contextvars()
    runner.shutdown(wait=True)

    assert seen == {"event_type": "app_mention", "event_id": "Ev1"}
    failures = [entry for entry in captured.entries if entry["event"] == "background_job_failed"]
    assert len(failures) == 1
    assert failures[0]["event_id"] == "Ev1"
    assert failures[0]["job"] == "docbase-forward-1234567"
