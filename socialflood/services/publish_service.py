"""Publish orchestration: fan a post package out to its platforms.

Every enabled variant is validated, then each valid one is submitted as an
independent task. Submissions are joined with "collect every outcome"
semantics, so a network error, rejection or rate limit on one platform
never cancels or delays the others. Per-platform failures are recorded on
the variant; only a package with nothing to publish is rejected as a whole.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from socialflood.exceptions import (
    EmptyPackageError,
    ErrorKind,
    SocialFloodError,
    ValidationFailed,
)
from socialflood.platforms.registry import descriptor
from socialflood.schemas.payloads import PublishResponse, build_request
from socialflood.schemas.post import PostPackage, PostVariant, PublishFailure
from socialflood.services.post_service import package_status, validate

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from socialflood.platforms.base import Platform
    from socialflood.schemas.payloads import PublishRequest
    from socialflood.services.connection_service import ConnectionSnapshot

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Anything that can submit one platform request."""

    async def publish(self, request: PublishRequest) -> PublishResponse: ...


def _failed(variant: PostVariant, kind: ErrorKind, message: str, **extra: object) -> PostVariant:
    return variant.model_copy(
        update={"status": "failed", "error_kind": kind, "error": message, **extra}
    )


def publish_failures(package: PostPackage) -> list[PublishFailure]:
    """Failures of a package's enabled variants, in variant order."""
    return [
        PublishFailure(
            platform=platform,
            kind=variant.error_kind or ErrorKind.REMOTE_ERROR,
            message=variant.error or f"Failed to post to {descriptor(platform).display_name}",
        )
        for platform, variant in package.enabled_variants().items()
        if variant.status == "failed"
    ]


class PublishOrchestrator:
    """Validates a package and fans its variants out to their platforms."""

    def __init__(self, publisher: Publisher) -> None:
        self.publisher = publisher

    @staticmethod
    def _with_variants(
        package: PostPackage,
        variants: dict[Platform, PostVariant],
        on_update: Callable[[PostPackage], None] | None,
    ) -> PostPackage:
        updated = package.model_copy(
            update={"variants": dict(variants), "status": package_status(variants.values())}
        )
        if on_update is not None:
            on_update(updated)
        return updated

    async def _submit(
        self, platform: Platform, request: PublishRequest
    ) -> PublishResponse | PublishFailure:
        try:
            return await self.publisher.publish(request)
        except SocialFloodError as exc:
            logger.warning("Publish to %s failed: %s", platform.value, exc.message)
            return PublishFailure(platform=platform, kind=exc.kind, message=exc.message)

    async def publish(
        self,
        package: PostPackage,
        *,
        connections: Mapping[Platform, ConnectionSnapshot] | None = None,
        on_update: Callable[[PostPackage], None] | None = None,
    ) -> PostPackage:
        """Publish every enabled variant that has not already succeeded.

        When ``connections`` is given, variants whose platform has no active
        connection fail without being submitted. ``on_update`` receives the
        package after each phase (pending, posting, done).

        Raises EmptyPackageError if no variant is enabled, or if every
        enabled variant has already been published.
        """
        if package.status == "posting":
            raise ValueError(f"Package {package.id} is already being published")
        enabled = package.enabled_variants()
        if not enabled:
            raise EmptyPackageError("Nothing to publish: no platform is enabled")
        targets = [p for p, v in enabled.items() if v.status != "success"]
        if not targets:
            raise EmptyPackageError("Every enabled platform has already been published")

        variants = dict(package.variants)
        for platform in targets:
            variants[platform] = variants[platform].model_copy(
                update={
                    "status": "pending",
                    "error": None,
                    "error_kind": None,
                    "validation_errors": (),
                }
            )
        package = self._with_variants(package, variants, on_update)

        requests: dict[Platform, PublishRequest] = {}
        for platform in targets:
            variant = variants[platform]
            result = validate(variant, platform)
            if not result.is_valid:
                logger.info("Holding back %s: %s", platform.value, "; ".join(result.messages))
                variants[platform] = _failed(
                    variant,
                    ErrorKind.VALIDATION_FAILED,
                    "; ".join(result.messages),
                    validation_errors=result.errors,
                )
                continue

            account_id: str | None = None
            if connections is not None:
                snap = connections.get(platform)
                name = descriptor(platform).display_name
                if snap is not None and snap.fetch_error is not None:
                    variants[platform] = _failed(
                        variant,
                        snap.fetch_error,
                        snap.error_message or f"Could not check the {name} connection",
                    )
                    continue
                if snap is None or not snap.is_connected:
                    variants[platform] = _failed(
                        variant, ErrorKind.UNAUTHENTICATED, f"{name} is not connected"
                    )
                    continue
                if snap.connection is not None:
                    account_id = snap.connection.platform_account_id

            try:
                requests[platform] = build_request(platform, variant, account_id)
            except ValidationFailed as exc:
                variants[platform] = _failed(variant, exc.kind, exc.message)
                continue
            variants[platform] = variant.model_copy(update={"status": "posting"})
        package = self._with_variants(package, variants, on_update)

        if not requests:
            return package

        platforms = list(requests)
        logger.info(
            "Publishing package %s to %s", package.id, ", ".join(p.value for p in platforms)
        )
        outcomes = await asyncio.gather(
            *(self._submit(p, requests[p]) for p in platforms), return_exceptions=True
        )
        for platform, outcome in zip(platforms, outcomes, strict=True):
            variant = variants[platform]
            if isinstance(outcome, PublishResponse):
                variants[platform] = variant.model_copy(
                    update={
                        "status": "success",
                        "post_id": outcome.post_id,
                        "platform_post_id": outcome.platform_post_id,
                    }
                )
            elif isinstance(outcome, PublishFailure):
                variants[platform] = _failed(variant, outcome.kind, outcome.message)
            elif isinstance(outcome, Exception):
                logger.error("Publish to %s crashed", platform.value, exc_info=outcome)
                variants[platform] = _failed(
                    variant,
                    ErrorKind.REMOTE_ERROR,
                    f"Failed to post to {descriptor(platform).display_name}",
                )
            else:
                raise outcome

        package = self._with_variants(package, variants, on_update)
        logger.info("Package %s finished with status %s", package.id, package.status)
        return package
