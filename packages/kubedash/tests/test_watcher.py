"""Tests for kubedash.app.watcher -- kubectl output parsing and polling."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from kubedash.app.context import SelectionContext
from kubedash.app.message import (
    ChoicesResponse,
    ContextsRequest,
    ContextsResponse,
    KindsRequest,
    LogLines,
    Message,
    NamespacesRequest,
    NamespacesResponse,
    RawRequest,
    ResourceError,
    TableSnapshot,
    TextSnapshot,
    ViewId,
    YamlNamesRequest,
    YamlRequest,
)
from kubedash.app.watcher import (
    KubectlError,
    KubectlWatcher,
    parse_table,
    parse_tables,
    pick,
    run_command,
)

from .test_loop import wait_for

FAKE_KUBECTL = r"""#!/bin/sh
case "$*" in
  "get pods -n dev")
    printf 'NAME    READY   STATUS    NOMINATED NODE\napi-1   1/1     Running   <none>\n' ;;
  "get configmaps,secrets -n dev")
    printf 'NAME            DATA   AGE\nconfigmap/app   2      5d\n\nNAME           TYPE     DATA   AGE\nsecret/token   Opaque   1      3d\n' ;;
  "get events -n dev")
    printf 'LAST SEEN   TYPE     REASON\n1m          Normal   Pulled\n' ;;
  "get namespaces -o name")
    printf 'namespace/default\nnamespace/dev\n' ;;
  "config get-contexts -o name")
    printf 'east\nwest\n' ;;
  "config current-context")
    printf 'east\n' ;;
  "get configmap/app -n dev -o yaml")
    printf 'apiVersion: v1\nkind: ConfigMap\n' ;;
  "api-resources --verbs=get -o name")
    printf 'pods\ndeployments.apps\n' ;;
  "get deployments.apps -n dev -o name")
    printf 'deployment.apps/api\ndeployment.apps/web\n' ;;
  "get deployments.apps -n prod -o name")
    printf 'deployment.apps/api\n' ;;
  "get deployments.apps api -n dev -o yaml")
    printf 'kind: Deployment\nmetadata:\n  name: api\n' ;;
  "--context west get pods -n dev")
    printf 'NAME    READY\nwest-1  1/1\n' ;;
  logs*)
    printf 'line 1\nline 2\n' ;;
  *)
    echo "error: unknown command $*" >&2
    exit 1 ;;
esac
"""


@pytest.fixture
def kubectl(tmp_path: Path) -> str:
    path = tmp_path / "kubectl"
    path.write_text(FAKE_KUBECTL)
    path.chmod(path.stat().st_mode | stat.S_IEXEC)
    return str(path)


def make_watcher(kubectl: str, namespaces: list[str] | None = None, context: str | None = None):
    posted: list[Message] = []
    selection = SelectionContext(context, namespaces or ["dev"])
    watcher = KubectlWatcher(posted.append, selection, kubectl=kubectl, poll_interval=30)
    return watcher, posted, selection


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseTable:
    def test_columns_follow_header(self) -> None:
        header, rows = parse_table(
            "NAME    READY   STATUS    NOMINATED NODE\n"
            "api-1   1/1     Running   <none>\n"
        )
        assert header == ["NAME", "READY", "STATUS", "NOMINATED NODE"]
        assert rows == [["api-1", "1/1", "Running", "<none>"]]

    def test_empty(self) -> None:
        assert parse_table("") == ([], [])

    def test_short_rows(self) -> None:
        _header, rows = parse_table("NAME   AGE\nx\n")
        assert rows == [["x", ""]]

    def test_several_tables(self) -> None:
        tables = parse_tables("A   B\n1   2\n\nC\n3\n")
        assert tables == [(["A", "B"], [["1", "2"]]), (["C"], [["3"]])]

    def test_pick(self) -> None:
        assert pick(["NAME", "AGE"], ["x", "1d"], "AGE") == "1d"
        assert pick(["NAME"], ["x"], "AGE", "-") == "-"


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_stdout(self) -> None:
        assert await run_command([sys.executable, "-c", "print('hi')"]) == "hi\n"

    @pytest.mark.asyncio
    async def test_failure_raises(self) -> None:
        script = "import sys; sys.stderr.write('nope'); sys.exit(3)"
        with pytest.raises(KubectlError) as exc_info:
            await run_command([sys.executable, "-c", script])
        assert exc_info.value.returncode == 3
        assert str(exc_info.value) == "nope"

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            await run_command([str(tmp_path / "missing")])


# ---------------------------------------------------------------------------
# Polling and requests
# ---------------------------------------------------------------------------


class TestPolling:
    @pytest.mark.asyncio
    async def test_pods(self, kubectl: str) -> None:
        watcher, posted, selection = make_watcher(kubectl)
        await watcher.poll_pods(selection.snapshot())
        assert posted == [
            TableSnapshot(
                ViewId.PODS,
                ["NAMESPACE", "NAME", "READY", "STATUS", "NOMINATED NODE"],
                [["dev", "api-1", "1/1", "Running", "<none>"]],
            )
        ]

    @pytest.mark.asyncio
    async def test_context_is_passed(self, kubectl: str) -> None:
        watcher, posted, selection = make_watcher(kubectl, context="west")
        await watcher.poll_pods(selection.snapshot())
        assert posted[0].rows == [["dev", "west-1", "1/1"]]

    @pytest.mark.asyncio
    async def test_configs(self, kubectl: str) -> None:
        watcher, posted, selection = make_watcher(kubectl)
        await watcher.poll_configs(selection.snapshot())
        assert posted == [
            TableSnapshot(
                ViewId.CONFIGS,
                ["NAMESPACE", "NAME", "DATA", "AGE"],
                [["dev", "configmap/app", "2", "5d"], ["dev", "secret/token", "1", "3d"]],
            )
        ]

    @pytest.mark.asyncio
    async def test_events(self, kubectl: str) -> None:
        watcher, posted, selection = make_watcher(kubectl)
        await watcher.poll_events(selection.snapshot())
        (snapshot,) = posted
        assert isinstance(snapshot, TextSnapshot)
        assert snapshot.target is ViewId.EVENTS
        assert len(snapshot.lines) == 2
        assert snapshot.lines[1].endswith("1m          Normal   Pulled")

    @pytest.mark.asyncio
    async def test_poll_failure_becomes_resource_errors(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl, namespaces=["nope"])
        await watcher.poll_once()
        assert [m.target for m in posted] == [ViewId.PODS, ViewId.CONFIGS, ViewId.EVENTS]
        assert all(isinstance(m, ResourceError) for m in posted)
        assert "unknown command" in posted[0].message

    @pytest.mark.asyncio
    async def test_poll_selected_targets(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.poll_once([ViewId.EVENTS])
        assert [m.target for m in posted] == [ViewId.EVENTS]

    @pytest.mark.asyncio
    async def test_namespaces(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(NamespacesRequest())
        assert posted == [NamespacesResponse(["default", "dev"])]

    @pytest.mark.asyncio
    async def test_contexts(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(ContextsRequest())
        assert posted == [ContextsResponse(["east", "west"], "east")]

    @pytest.mark.asyncio
    async def test_raw(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(RawRequest("dev", "configmap/app"))
        assert posted == [TextSnapshot(ViewId.RAW, ["apiVersion: v1", "kind: ConfigMap"])]

    @pytest.mark.asyncio
    async def test_kinds(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(KindsRequest())
        assert posted == [ChoicesResponse(ViewId.YAML_KINDS, ["pods", "deployments.apps"])]

    @pytest.mark.asyncio
    async def test_yaml_names_span_namespaces(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl, ["dev", "prod"])
        await watcher.handle(YamlNamesRequest("deployments.apps"))
        assert posted == [ChoicesResponse(ViewId.YAML_NAMES, ["dev/api", "dev/web", "prod/api"])]

    @pytest.mark.asyncio
    async def test_yaml(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(YamlRequest("deployments.apps", "dev", "api"))
        assert posted == [TextSnapshot(ViewId.YAML, ["kind: Deployment", "metadata:", "  name: api"])]

    @pytest.mark.asyncio
    async def test_yaml_failure_targets_yaml_pane(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(YamlNamesRequest("widgets"))
        (error,) = posted
        assert isinstance(error, ResourceError)
        assert error.target is ViewId.YAML_NAMES
        assert "unknown command" in error.message

    @pytest.mark.asyncio
    async def test_request_failure_targets_pane(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.handle(RawRequest("dev", "missing"))
        (error,) = posted
        assert isinstance(error, ResourceError)
        assert error.target is ViewId.RAW


class TestLogs:
    @pytest.mark.asyncio
    async def test_stream(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.stream_logs([kubectl, "logs", "-f", "api-1"])
        lines = [line for m in posted if isinstance(m, LogLines) for line in m.lines]
        assert lines == ["line 1", "line 2"]
        assert not any(isinstance(m, ResourceError) for m in posted)

    @pytest.mark.asyncio
    async def test_stream_failure(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        await watcher.stream_logs([kubectl, "bogus"])
        assert posted[-1] == ResourceError(ViewId.LOGS, "error: unknown command bogus")

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path: Path) -> None:
        watcher, posted, _selection = make_watcher(str(tmp_path / "missing"))
        await watcher.stream_logs([str(tmp_path / "missing"), "logs"])
        assert len(posted) == 1
        assert isinstance(posted[0], ResourceError)


# ---------------------------------------------------------------------------
# Thread lifecycle
# ---------------------------------------------------------------------------


class TestThread:
    def test_request_before_start_is_served(self, kubectl: str) -> None:
        watcher, posted, _selection = make_watcher(kubectl)
        watcher.request(NamespacesRequest())
        watcher.start()
        try:
            assert wait_for(lambda: NamespacesResponse(["default", "dev"]) in posted)
            assert wait_for(lambda: any(isinstance(m, TableSnapshot) for m in posted))
        finally:
            watcher.stop()

    def test_stop_before_start(self, kubectl: str) -> None:
        watcher, _posted, _selection = make_watcher(kubectl)
        watcher.stop()

    def test_stop_ends_thread(self, kubectl: str) -> None:
        watcher, _posted, _selection = make_watcher(kubectl)
        watcher.start()
        watcher.stop()
        assert watcher._thread is not None
        assert not watcher._thread.is_alive()
