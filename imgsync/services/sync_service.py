"""
Sync service for imgsync.

Drives a single sync pass: checks the target, then for each configured
source lists its tags, selects the ones to sync, compares them with the
target and copies what is missing.

Error policy:
- credential, healthcheck and tag-selection errors always abort
- listing the target never aborts (an unlistable target is treated as empty)
- listing a source and copying a tag abort unless `continueOnSyncError`
  is set, in which case the source or tag is skipped
"""

import logging
from typing import Generator, List, Optional

from ..domain.repository import Repository
from ..domain.result import SourceSyncResult, SyncStatus, SyncSummary, TagSyncDetail
from ..domain.source import RunConfig, SourceSpec
from ..exit_codes import CopyError, ListError
from ..infra.registry_client import RegistryClient
from .reconciler import missing_tags, sync_set
from .tag_matcher import filter_tags


class SyncService:
    """
    Service syncing source repositories into the target repository.

    Example:
        service = SyncService(config, RegistryClient())

        for progress in service.sync():
            print(progress)  # "library/busybox : syncing 1.36 to ..."

        summary = service.last_result
        print(f"Copied {summary.tags_copied} tags")
    """

    def __init__(
        self,
        config: RunConfig,
        client: Optional[RegistryClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize SyncService.

        Args:
            config: Run configuration
            client: Registry client (a default RegistryClient if None)
            logger: Logger for sync decisions (module logger if None)
        """
        self.config = config
        self.client = client or RegistryClient()
        self.logger = logger or logging.getLogger(__name__)
        self.last_result: Optional[SyncSummary] = None

    def sync(self) -> Generator[str, None, SyncSummary]:
        """
        Run one sync pass.

        Yields progress messages, returns the SyncSummary.

        Raises:
            AuthError, HealthcheckError, FilterError: Always
            ListError, CopyError: Unless continueOnSyncError is set
        """
        target = self.config.target
        summary = SyncSummary(target_address=target.address)
        self.last_result = summary

        self._login(target, "target")

        try:
            self.client.healthcheck(target)
        except Exception:
            self.logger.error("Target registry is unavailable. Stopping")
            raise
        self.logger.debug("Target registry is healthy")

        yield f"Images will be synced to {target.address}"

        for spec in self.config.sources:
            result = SourceSyncResult(source_address=spec.source.address)
            summary.add_source(result)
            yield from self._sync_source(spec, result, summary)

        return summary

    def _login(self, repository: Repository, role: str) -> None:
        if not repository.auth.is_set:
            return
        self.logger.debug(f"{repository.address} : encoding {role} credentials")
        try:
            self.client.set_credentials(
                repository.registry_host,
                repository.auth.username,
                repository.auth.password,
            )
        except Exception as e:
            self.logger.error(f"{role} auth failed : {e}")
            raise

    def _sync_source(
        self,
        spec: SourceSpec,
        result: SourceSyncResult,
        summary: SyncSummary,
    ) -> Generator[str, None, None]:
        source_addr = spec.source.address
        yield f"Starting sync : {spec.source.repository}"

        self._login(spec.source, "source")

        try:
            source_tags = self.client.list_tags(source_addr)
        except ListError as e:
            if not self.config.continue_on_sync_error:
                raise
            self.logger.debug(f"{e}")
            self.logger.warning("continueOnSyncError flag enabled : List source error ignored.")
            result.status = SyncStatus.FAILED
            result.error = str(e)
            summary.add_error(f"{source_addr}: {e}")
            return
        result.listed = len(source_tags)

        target_addr = spec.target_address(self.config.target)
        result.target_address = target_addr
        self.logger.info(f"{source_addr} : target repo is {target_addr}")

        selected = filter_tags(source_tags, spec, logger=self.logger)
        result.selected = len(selected)
        self.logger.info(
            f"{source_addr} : {len(selected)}/{len(source_tags)} tags matching selectors"
        )

        target_tags = self._list_target(target_addr)
        missing = missing_tags(selected, target_tags)
        forced = list(spec.mutable_tags)
        result.missing = len(missing)
        result.forced = len(forced)
        if missing:
            self.logger.info(f"{source_addr} : {len(missing)} missing tags to sync")
        if forced:
            self.logger.info(f"{source_addr} : {len(forced)} tags forced to sync")

        tags = sync_set(missing, forced)
        if not tags:
            result.status = SyncStatus.UP_TO_DATE
            self.logger.debug(f"{source_addr} : target is up-to-date")
            yield f"{source_addr} : target is up-to-date"
            return

        for tag in tags:
            yield f"{source_addr} : syncing {tag} to {target_addr}:{tag}"
            self._copy_tag(tag, source_addr, target_addr, result, summary)

        if result.failed:
            result.status = SyncStatus.FAILED

    def _list_target(self, target_addr: str) -> List[str]:
        """Target tags; a failed listing counts as an empty repository."""
        try:
            return self.client.list_tags(target_addr)
        except ListError as e:
            self.logger.debug(f"{target_addr} : listing failed, syncing all selected tags ({e})")
            return []

    def _copy_tag(
        self,
        tag: str,
        source_addr: str,
        target_addr: str,
        result: SourceSyncResult,
        summary: SyncSummary,
    ) -> None:
        detail = TagSyncDetail(
            tag=tag,
            source_ref=f"{source_addr}:{tag}",
            target_ref=f"{target_addr}:{tag}",
            status=SyncStatus.SUCCESS,
        )
        result.details.append(detail)

        try:
            self.client.copy_tag(tag, source_addr, target_addr)
        except CopyError as e:
            detail.status = SyncStatus.FAILED
            detail.error = str(e)
            if not self.config.continue_on_sync_error:
                raise
            self.logger.error(f"{e}")
            self.logger.warning("continueOnSyncError flag enabled : Sync error ignored.")
            summary.add_error(f"{detail.target_ref}: {e}")
