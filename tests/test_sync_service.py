"""
Tests for the sync service (orchestration and error policy).
"""

import logging
from unittest.mock import MagicMock, call

import pytest

from imgsync.domain.repository import Auth, Repository
from imgsync.domain.result import SyncStatus
from imgsync.domain.source import RunConfig, SourceSpec
from imgsync.exit_codes import (
    AuthError,
    CopyError,
    FilterError,
    HealthcheckError,
    ListError,
)
from imgsync.infra.registry_client import RegistryClient
from imgsync.services.sync_service import SyncService

TARGET = Repository(repository="mirror", host="registry.example.com")

BUSYBOX = "index.docker.io/library/busybox"
BUSYBOX_TARGET = "registry.example.com/mirror/library/busybox"
ETCD = "quay.io/coreos/etcd"
ETCD_TARGET = "registry.example.com/mirror/coreos/etcd"


def make_client(inventories):
    """
    Mock registry client.

    `inventories` maps an address to its tag list, or to an exception
    raised when listing it. Unknown addresses fail to list.
    """
    client = MagicMock(spec=RegistryClient)

    def list_tags(address):
        value = inventories.get(address, ListError(f"repo list tags {address}: not found"))
        if isinstance(value, Exception):
            raise value
        return list(value)

    client.list_tags.side_effect = list_tags
    return client


def busybox(**kwargs):
    for key in ('tags', 'mutable_tags', 'regex_tags'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    return SourceSpec(source=Repository(repository="library/busybox"), **kwargs)


def etcd(**kwargs):
    for key in ('tags', 'mutable_tags', 'regex_tags'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    return SourceSpec(source=Repository(repository="coreos/etcd", host="quay.io"), **kwargs)


def run(service):
    """Consume the sync generator, return (messages, summary)."""
    messages = list(service.sync())
    return messages, service.last_result


class TestSyncService:
    """Tests for the happy path."""

    def test_copies_missing_tags(self):
        client = make_client({
            BUSYBOX: ["1.35", "1.36", "latest"],
            BUSYBOX_TARGET: ["1.35"],
        })
        config = RunConfig(target=TARGET, sources=(busybox(regex_tags=[r"^1\."]),))

        messages, summary = run(SyncService(config, client))

        client.healthcheck.assert_called_once_with(TARGET)
        assert client.copy_tag.call_args_list == [call("1.36", BUSYBOX, BUSYBOX_TARGET)]
        assert summary.tags_copied == 1
        assert summary.sources_synced == 1
        assert summary.success is True

        source = summary.sources[0]
        assert source.target_address == BUSYBOX_TARGET
        assert (source.listed, source.selected, source.missing, source.forced) == (3, 2, 1, 0)
        assert any("syncing 1.36" in m for m in messages)

    def test_up_to_date(self):
        client = make_client({
            BUSYBOX: ["1.36", "latest"],
            BUSYBOX_TARGET: ["1.36", "latest"],
        })
        config = RunConfig(target=TARGET, sources=(busybox(tags=["latest", "1.36"]),))

        messages, summary = run(SyncService(config, client))

        client.copy_tag.assert_not_called()
        assert summary.sources[0].status == SyncStatus.UP_TO_DATE
        assert summary.sources_up_to_date == 1
        assert any("up-to-date" in m for m in messages)

    def test_forced_tags_always_synced(self):
        client = make_client({
            BUSYBOX: ["latest"],
            BUSYBOX_TARGET: ["latest"],
        })
        config = RunConfig(target=TARGET, sources=(busybox(mutable_tags=["latest"]),))

        _, summary = run(SyncService(config, client))

        assert client.copy_tag.call_args_list == [call("latest", BUSYBOX, BUSYBOX_TARGET)]
        assert summary.sources[0].forced == 1

    def test_missing_and_forced_tag_copied_twice(self):
        client = make_client({BUSYBOX: ["latest"], BUSYBOX_TARGET: []})
        config = RunConfig(
            target=TARGET,
            sources=(busybox(tags=["latest"], mutable_tags=["latest"]),),
        )

        _, summary = run(SyncService(config, client))

        assert client.copy_tag.call_count == 2
        assert summary.tags_copied == 2

    def test_sources_processed_in_order(self):
        client = make_client({
            ETCD: ["v3.5.0"],
            BUSYBOX: ["1.36"],
        })
        config = RunConfig(
            target=TARGET,
            sources=(etcd(tags=["v3.5.0"]), busybox(tags=["1.36"])),
        )

        run(SyncService(config, client))

        assert client.copy_tag.call_args_list == [
            call("v3.5.0", ETCD, ETCD_TARGET),
            call("1.36", BUSYBOX, BUSYBOX_TARGET),
        ]

    def test_flat_target_uses_basename(self):
        target = Repository(repository="mirror", host="quay.io")
        client = make_client({BUSYBOX: ["1.36"]})
        config = RunConfig(target=target, sources=(busybox(tags=["1.36"]),))

        run(SyncService(config, client))

        client.copy_tag.assert_called_once_with("1.36", BUSYBOX, "quay.io/mirror/busybox")

    def test_logger_is_used(self, caplog):
        logger = logging.getLogger("tests.sync")
        client = make_client({BUSYBOX: ["1.36"], BUSYBOX_TARGET: []})
        config = RunConfig(target=TARGET, sources=(busybox(tags=["1.36"]),))

        with caplog.at_level(logging.INFO, logger="tests.sync"):
            run(SyncService(config, client, logger=logger))

        assert "1/1 tags matching selectors" in caplog.text
        assert "target repo is registry.example.com/mirror/library/busybox" in caplog.text

    def test_logger_reaches_tag_selection(self, caplog):
        logger = logging.getLogger("tests.sync")
        client = make_client({BUSYBOX: ["1.35.0", "1.36.0", "latest"], BUSYBOX_TARGET: []})
        config = RunConfig(target=TARGET, sources=(busybox(latest_semver_sync=True),))

        with caplog.at_level(logging.DEBUG, logger="tests.sync"):
            run(SyncService(config, client, logger=logger))

        messages = [r.getMessage() for r in caplog.records if r.name == "tests.sync"]
        assert f"{BUSYBOX} : 2 semver candidates" in messages

    def test_copy_announced_once(self, caplog):
        logger = logging.getLogger("tests.sync")
        client = make_client({BUSYBOX: ["1.36"], BUSYBOX_TARGET: []})
        config = RunConfig(target=TARGET, sources=(busybox(tags=["1.36"]),))

        with caplog.at_level(logging.DEBUG, logger="tests.sync"):
            messages, _ = run(SyncService(config, client, logger=logger))

        announcement = f"{BUSYBOX} : syncing 1.36 to {BUSYBOX_TARGET}:1.36"
        assert messages.count(announcement) == 1
        assert announcement not in caplog.text


class TestSyncCredentials:
    """Tests for credential handling."""

    def test_target_and_source_credentials(self):
        target = Repository(
            repository="mirror", host="registry.example.com",
            auth=Auth(username="pusher", password="s3cret"),
        )
        source = SourceSpec(
            source=Repository(repository="library/busybox",
                              auth=Auth(username="reader", password="token")),
        )
        client = make_client({BUSYBOX: []})

        run(SyncService(RunConfig(target=target, sources=(source,)), client))

        assert client.set_credentials.call_args_list == [
            call("registry.example.com", "pusher", "s3cret"),
            call("index.docker.io", "reader", "token"),
        ]

    def test_no_credentials_configured(self):
        client = make_client({BUSYBOX: []})
        run(SyncService(RunConfig(target=TARGET, sources=(busybox(),)), client))
        client.set_credentials.assert_not_called()

    def test_auth_error_is_fatal(self):
        target = Repository(repository="mirror", auth=Auth(username="u", password="p"))
        client = make_client({})
        client.set_credentials.side_effect = AuthError("host auth: denied")
        config = RunConfig(target=target, sources=(busybox(),), continue_on_sync_error=True)

        with pytest.raises(AuthError):
            run(SyncService(config, client))
        client.healthcheck.assert_not_called()


class TestSyncErrorPolicy:
    """Tests for fatal and recoverable errors."""

    def test_healthcheck_failure_is_fatal(self):
        client = make_client({})
        client.healthcheck.side_effect = HealthcheckError("status code 500")
        config = RunConfig(target=TARGET, sources=(busybox(),), continue_on_sync_error=True)

        with pytest.raises(HealthcheckError):
            run(SyncService(config, client))
        client.list_tags.assert_not_called()

    def test_source_list_error_aborts(self):
        client = make_client({ETCD: ["v3.5.0"]})
        config = RunConfig(target=TARGET, sources=(busybox(tags=["1.36"]), etcd(tags=["v3.5.0"])))

        with pytest.raises(ListError):
            run(SyncService(config, client))
        assert call(ETCD) not in client.list_tags.call_args_list
        client.copy_tag.assert_not_called()

    def test_source_list_error_continues(self):
        client = make_client({ETCD: ["v3.5.0"]})
        config = RunConfig(
            target=TARGET,
            sources=(busybox(tags=["1.36"]), etcd(tags=["v3.5.0"])),
            continue_on_sync_error=True,
        )

        _, summary = run(SyncService(config, client))

        client.copy_tag.assert_called_once_with("v3.5.0", ETCD, ETCD_TARGET)
        assert summary.sources_failed == 1
        assert summary.sources_synced == 1
        assert summary.sources[0].status == SyncStatus.FAILED
        assert len(summary.errors) == 1
        assert summary.success is False

    def test_target_list_error_tolerated(self):
        client = make_client({
            BUSYBOX: ["1.35", "1.36"],
            BUSYBOX_TARGET: ListError("repo list tags: NAME_UNKNOWN"),
        })
        config = RunConfig(target=TARGET, sources=(busybox(tags=["1.35", "1.36"]),))

        _, summary = run(SyncService(config, client))

        assert client.copy_tag.call_args_list == [
            call("1.35", BUSYBOX, BUSYBOX_TARGET),
            call("1.36", BUSYBOX, BUSYBOX_TARGET),
        ]
        assert summary.success is True

    def test_filter_error_is_fatal(self):
        client = make_client({BUSYBOX: ["1.36"], ETCD: ["v3.5.0"]})
        config = RunConfig(
            target=TARGET,
            sources=(busybox(regex_tags=["("]), etcd(tags=["v3.5.0"])),
            continue_on_sync_error=True,
        )

        with pytest.raises(FilterError):
            run(SyncService(config, client))
        client.copy_tag.assert_not_called()

    def test_copy_error_aborts_without_rollback(self):
        client = make_client({BUSYBOX: ["1", "2", "3"], BUSYBOX_TARGET: []})
        client.copy_tag.side_effect = [None, CopyError("repo copy tag: denied"), None]
        config = RunConfig(target=TARGET, sources=(busybox(tags=["1", "2", "3"]),))
        service = SyncService(config, client)

        with pytest.raises(CopyError):
            run(service)

        assert client.copy_tag.call_count == 2
        details = service.last_result.sources[0].details
        assert [d.status for d in details] == [SyncStatus.SUCCESS, SyncStatus.FAILED]

    def test_copy_error_continues(self):
        client = make_client({BUSYBOX: ["1", "2", "3"], BUSYBOX_TARGET: []})
        client.copy_tag.side_effect = [None, CopyError("repo copy tag: denied"), None]
        config = RunConfig(
            target=TARGET,
            sources=(busybox(tags=["1", "2", "3"]),),
            continue_on_sync_error=True,
        )

        _, summary = run(SyncService(config, client))

        assert client.copy_tag.call_count == 3
        assert summary.tags_copied == 2
        assert summary.tags_failed == 1
        assert summary.sources[0].status == SyncStatus.FAILED
        assert summary.errors == [f"{BUSYBOX_TARGET}:2: repo copy tag: denied"]
