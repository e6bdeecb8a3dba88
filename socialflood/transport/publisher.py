"""Submission of one platform request to the platform-posting endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from socialflood.exceptions import RemoteError
from socialflood.platforms.registry import descriptor
from socialflood.schemas.payloads import PublishResponse

if TYPE_CHECKING:
    from socialflood.schemas.payloads import PublishRequest
    from socialflood.transport.http import ApiClient

logger = logging.getLogger(__name__)


class PlatformPublisher:
    """Posts a platform request through ``POST /api/platforms/{platform}/posts``."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def publish(self, request: PublishRequest) -> PublishResponse:
        """Submit a request. Raises a SocialFloodError subclass on failure."""
        platform = request.platform
        fallback = f"Failed to post to {descriptor(platform).display_name}"
        response = await self.api.request_model(
            "POST",
            f"/api/platforms/{platform.value}/posts",
            PublishResponse,
            json=request.to_body(),
            fallback_message=fallback,
        )
        if not response.success:
            raise RemoteError(response.message or fallback)
        logger.info(
            "Posted to %s: %s", platform.value, response.platform_post_id or response.post_id
        )
        return response
