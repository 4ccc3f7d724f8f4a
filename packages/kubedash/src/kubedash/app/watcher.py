"""Resource watcher: polls ``kubectl`` and streams logs on its own thread.

The watcher runs an asyncio loop in a background thread.  It never touches
widgets; everything it learns is posted to the dashboard's queue as a
resource event, and command failures are posted as
:class:`~kubedash.app.message.ResourceError` so they show up in the pane
that asked for the data.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import threading
from typing import Callable, Sequence

from kubedash.app.context import Selection, SelectionContext
from kubedash.app.message import (
    ChoicesResponse,
    ContextsRequest,
    ContextsResponse,
    KindsRequest,
    LogLines,
    LogRequest,
    Message,
    NamespacesRequest,
    NamespacesResponse,
    RawRequest,
    RefreshRequest,
    Request,
    ResourceError,
    TableSnapshot,
    TextSnapshot,
    ViewId,
    YamlNamesRequest,
    YamlRequest,
)

logger = logging.getLogger(__name__)

_COLUMN_RE = re.compile(r"\S+(?: \S+)*")
LOG_BATCH_WAIT = 0.05
LOG_BATCH_MAX = 200

# Pane that shows the failure of each request type.
_REQUEST_TARGETS: dict[type, ViewId] = {
    LogRequest: ViewId.LOGS,
    RawRequest: ViewId.RAW,
    NamespacesRequest: ViewId.NAMESPACES,
    ContextsRequest: ViewId.CONTEXTS,
    KindsRequest: ViewId.YAML_KINDS,
    YamlNamesRequest: ViewId.YAML_NAMES,
    YamlRequest: ViewId.YAML,
}


class KubectlError(RuntimeError):
    """``kubectl`` exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self.stderr or f"kubectl {' '.join(args)} exited with {returncode}")


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def parse_table(text: str) -> tuple[list[str], list[list[str]]]:
    """Parse one aligned ``kubectl get`` table into header and rows.

    Columns start where header words start; header names may contain single
    spaces (``NOMINATED NODE``).
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return [], []
    header_line = lines[0]
    matches = list(_COLUMN_RE.finditer(header_line))
    header = [m.group(0) for m in matches]
    starts = [m.start() for m in matches]
    rows: list[list[str]] = []
    for line in lines[1:]:
        cells = []
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else None
            cells.append(line[start:end].strip())
        rows.append(cells)
    return header, rows


def parse_tables(text: str) -> list[tuple[list[str], list[list[str]]]]:
    """Parse output holding several blank-line separated tables."""
    blocks = re.split(r"\n\s*\n", text.strip())
    return [parse_table(block) for block in blocks if block.strip()]


def pick(header: Sequence[str], row: Sequence[str], column: str, default: str = "") -> str:
    try:
        index = list(header).index(column)
    except ValueError:
        return default
    return row[index] if index < len(row) else default


# ---------------------------------------------------------------------------
# Command runner
# ---------------------------------------------------------------------------


async def run_command(argv: Sequence[str], timeout: float | None = None) -> str:
    """Run *argv* and return its stdout; raise :class:`KubectlError` on failure."""
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        if timeout:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        else:
            stdout, stderr = await process.communicate()
    except BaseException:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        raise
    if process.returncode != 0:
        raise KubectlError(argv[1:], process.returncode or 0, stderr.decode("utf-8", errors="replace"))
    return stdout.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Watcher
# ---------------------------------------------------------------------------


class KubectlWatcher:
    """Polls pods, configs and events, and serves requests from the UI."""

    def __init__(
        self,
        post: Callable[[Message], None],
        selection: SelectionContext,
        *,
        kubectl: str = "kubectl",
        poll_interval: float = 1.0,
        log_tail: int = 1000,
        command_timeout: float = 10.0,
    ) -> None:
        self._post = post
        self._selection = selection
        self.kubectl = kubectl
        self.poll_interval = poll_interval
        self.log_tail = log_tail
        self.command_timeout = command_timeout
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._requests: asyncio.Queue[Request] | None = None
        self._pending: list[Request] = []
        self._stop: asyncio.Event | None = None
        self._stopping = False
        self._log_task: asyncio.Task[None] | None = None

    # -- thread lifecycle -------------------------------------------------------

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="kubectl-watcher", daemon=True)
        self._thread.start()
        logger.info("watcher started (poll every %.1fs)", self.poll_interval)

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            self._stopping = True
            if self._loop is not None and self._stop is not None:
                self._loop.call_soon_threadsafe(self._stop.set)
        if self._thread is not None:
            self._thread.join(timeout)
        logger.info("watcher stopped")

    def request(self, request: Request) -> None:
        """Queue *request*; safe to call from any thread."""
        with self._lock:
            if self._loop is None or self._requests is None:
                self._pending.append(request)
                return
            self._loop.call_soon_threadsafe(self._requests.put_nowait, request)

    def _run(self) -> None:
        try:
            asyncio.run(self._main())
        except Exception:
            logger.exception("watcher crashed")

    async def _main(self) -> None:
        requests: asyncio.Queue[Request] = asyncio.Queue()
        stop = asyncio.Event()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._requests = requests
            self._stop = stop
            for request in self._pending:
                requests.put_nowait(request)
            self._pending.clear()
            if self._stopping:
                stop.set()

        poller = asyncio.create_task(self._poll_forever(stop))
        try:
            while not stop.is_set():
                getter = asyncio.create_task(requests.get())
                stopper = asyncio.create_task(stop.wait())
                done, _ = await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
                for task in (getter, stopper):
                    if task not in done:
                        task.cancel()
                if getter in done:
                    await self.handle(getter.result())
        finally:
            with self._lock:
                self._loop = None
                self._requests = None
            poller.cancel()
            if self._log_task is not None:
                self._log_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller

    # -- kubectl helpers ----------------------------------------------------------

    def _argv(self, selection: Selection, *args: str) -> list[str]:
        argv = [self.kubectl]
        if selection.context:
            argv += ["--context", selection.context]
        return argv + list(args)

    async def kubectl_output(self, selection: Selection, *args: str) -> str:
        return await run_command(self._argv(selection, *args), timeout=self.command_timeout)

    # -- polling --------------------------------------------------------------------

    async def _poll_forever(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            await self.poll_once()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self.poll_interval)

    async def poll_once(self, targets: Sequence[ViewId] = ()) -> None:
        selection = self._selection.snapshot()
        jobs = {
            ViewId.PODS: self.poll_pods,
            ViewId.CONFIGS: self.poll_configs,
            ViewId.EVENTS: self.poll_events,
        }
        for target, job in jobs.items():
            if targets and target not in targets:
                continue
            try:
                await job(selection)
            except (KubectlError, OSError, asyncio.TimeoutError) as e:
                logger.warning("polling %s failed: %s", target.value, e)
                self._post(ResourceError(target, str(e) or type(e).__name__))

    async def poll_pods(self, selection: Selection) -> None:
        header: list[str] = []
        rows: list[list[str]] = []
        for namespace in selection.namespaces:
            output = await self.kubectl_output(selection, "get", "pods", "-n", namespace)
            ns_header, ns_rows = parse_table(output)
            header = header or ns_header
            rows += [[namespace, *row] for row in ns_rows]
        self._post(TableSnapshot(ViewId.PODS, ["NAMESPACE", *header] if header else [], rows))

    async def poll_configs(self, selection: Selection) -> None:
        rows: list[list[str]] = []
        for namespace in selection.namespaces:
            output = await self.kubectl_output(
                selection, "get", "configmaps,secrets", "-n", namespace
            )
            for header, table_rows in parse_tables(output):
                for row in table_rows:
                    rows.append(
                        [namespace, pick(header, row, "NAME"), pick(header, row, "DATA"), pick(header, row, "AGE")]
                    )
        header = ["NAMESPACE", "NAME", "DATA", "AGE"] if rows else []
        self._post(TableSnapshot(ViewId.CONFIGS, header, rows))

    async def poll_events(self, selection: Selection) -> None:
        lines: list[str] = []
        for namespace in selection.namespaces:
            output = await self.kubectl_output(selection, "get", "events", "-n", namespace)
            lines += [f"\x1b[90m{namespace}\x1b[39m  {line}" for line in output.splitlines() if line]
        self._post(TextSnapshot(ViewId.EVENTS, lines))

    # -- requests ---------------------------------------------------------------------

    async def handle(self, request: Request) -> None:
        selection = self._selection.snapshot()
        try:
            if isinstance(request, LogRequest):
                self._start_logs(selection, request)
            elif isinstance(request, RawRequest):
                output = await self.kubectl_output(
                    selection, "get", request.name, "-n", request.namespace, "-o", "yaml"
                )
                self._post(TextSnapshot(ViewId.RAW, output.splitlines()))
            elif isinstance(request, NamespacesRequest):
                output = await self.kubectl_output(selection, "get", "namespaces", "-o", "name")
                names = [line.split("/", 1)[-1] for line in output.splitlines() if line]
                self._post(NamespacesResponse(names))
            elif isinstance(request, ContextsRequest):
                output = await self.kubectl_output(selection, "config", "get-contexts", "-o", "name")
                current = (await self.kubectl_output(selection, "config", "current-context")).strip()
                self._post(ContextsResponse([line for line in output.splitlines() if line], current or None))
            elif isinstance(request, KindsRequest):
                output = await self.kubectl_output(selection, "api-resources", "--verbs=get", "-o", "name")
                self._post(ChoicesResponse(ViewId.YAML_KINDS, [line for line in output.splitlines() if line]))
            elif isinstance(request, YamlNamesRequest):
                await self.list_names(selection, request.kind)
            elif isinstance(request, YamlRequest):
                output = await self.kubectl_output(
                    selection, "get", request.kind, request.name, "-n", request.namespace, "-o", "yaml"
                )
                self._post(TextSnapshot(ViewId.YAML, output.splitlines()))
            elif isinstance(request, RefreshRequest):
                await self.poll_once(request.targets)
        except (KubectlError, OSError, asyncio.TimeoutError) as e:
            logger.warning("request %r failed: %s", request, e)
            target = _REQUEST_TARGETS.get(type(request), ViewId.EVENTS)
            self._post(ResourceError(target, str(e) or type(e).__name__))

    async def list_names(self, selection: Selection, kind: str) -> None:
        """Post ``namespace/name`` for every *kind* object in the selected namespaces."""
        names: list[str] = []
        for namespace in selection.namespaces:
            output = await self.kubectl_output(selection, "get", kind, "-n", namespace, "-o", "name")
            for line in output.splitlines():
                if line:
                    item = f"{namespace}/{line.rsplit('/', 1)[-1]}"
                    if item not in names:
                        names.append(item)
        self._post(ChoicesResponse(ViewId.YAML_NAMES, names))

    def _start_logs(self, selection: Selection, request: LogRequest) -> None:
        if self._log_task is not None:
            self._log_task.cancel()
        self._post(LogLines(ViewId.LOGS, [], reset=True))
        argv = self._argv(
            selection,
            "logs",
            "-f",
            f"--tail={self.log_tail}",
            "--all-containers",
            "-n",
            request.namespace,
            request.pod,
        )
        self._log_task = asyncio.create_task(self.stream_logs(argv))

    async def stream_logs(self, argv: Sequence[str]) -> None:
        """Follow *argv*'s stdout, posting lines in small batches."""
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("cannot start %s: %s", argv[0], e)
            self._post(ResourceError(ViewId.LOGS, str(e)))
            return
        assert process.stdout is not None
        batch: list[str] = []
        try:
            while True:
                try:
                    line = await asyncio.wait_for(process.stdout.readline(), timeout=LOG_BATCH_WAIT)
                except asyncio.TimeoutError:
                    line = None
                if line is not None:
                    if not line:
                        break
                    batch.append(line.decode("utf-8", errors="replace").rstrip("\n"))
                if batch and (line is None or len(batch) >= LOG_BATCH_MAX):
                    self._post(LogLines(ViewId.LOGS, batch))
                    batch = []
            if batch:
                self._post(LogLines(ViewId.LOGS, batch))
            await process.wait()
            if process.returncode:
                assert process.stderr is not None
                stderr = (await process.stderr.read()).decode("utf-8", errors="replace").strip()
                self._post(ResourceError(ViewId.LOGS, stderr or f"kubectl logs exited with {process.returncode}"))
        finally:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
