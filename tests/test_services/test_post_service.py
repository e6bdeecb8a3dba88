"""Tests for post packages: pure updates, validation and status derivation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from socialflood.exceptions import ErrorKind
from socialflood.platforms.base import Platform
from socialflood.platforms.registry import available_platforms
from socialflood.schemas.post import PostPackage, PostVariant
from socialflood.services import post_service
from socialflood.services.post_service import derive_status, package_status, validate


def _package(*platforms: Platform) -> PostPackage:
    return post_service.create_package(platforms or None)


class TestCreatePackage:
    def test_defaults_to_available_platforms(self) -> None:
        package = post_service.create_package()
        assert list(package.variants) == available_platforms()
        assert Platform.FACEBOOK not in package.variants
        assert package.status == "draft"

    def test_variants_start_empty_and_enabled(self) -> None:
        package = _package(Platform.TWITTER)
        variant = package.variants[Platform.TWITTER]
        assert variant.enabled is True
        assert variant.content == ""
        assert variant.media == ()
        assert variant.status is None

    def test_explicit_id_and_timestamp(self) -> None:
        created = datetime(2026, 3, 1, tzinfo=UTC)
        package = post_service.create_package(
            [Platform.BLUESKY], package_id="pkg-1", created_at=created
        )
        assert package.id == "pkg-1"
        assert package.created_at == created

    def test_generated_ids_are_unique(self) -> None:
        assert _package(Platform.TWITTER).id != _package(Platform.TWITTER).id


class TestUpdates:
    def test_set_content_returns_new_package(self) -> None:
        original = _package(Platform.TWITTER)
        updated = post_service.set_content(original, Platform.TWITTER, "hello")
        assert updated.variants[Platform.TWITTER].content == "hello"
        assert original.variants[Platform.TWITTER].content == ""

    def test_no_eager_validation(self) -> None:
        package = post_service.set_content(_package(Platform.TWITTER), Platform.TWITTER, "x" * 500)
        assert package.variants[Platform.TWITTER].content == "x" * 500
        assert package.variants[Platform.TWITTER].validation_errors == ()

    def test_add_and_remove_media(self) -> None:
        package = _package(Platform.INSTAGRAM)
        package = post_service.add_media(package, Platform.INSTAGRAM, "https://cdn/a.jpg")
        package = post_service.add_media(package, Platform.INSTAGRAM, "https://cdn/b.jpg")
        assert package.variants[Platform.INSTAGRAM].media == (
            "https://cdn/a.jpg",
            "https://cdn/b.jpg",
        )
        package = post_service.remove_media(package, Platform.INSTAGRAM, 0)
        assert package.variants[Platform.INSTAGRAM].media == ("https://cdn/b.jpg",)

    def test_set_and_clear_option(self) -> None:
        package = post_service.set_option(
            _package(Platform.PINTEREST), Platform.PINTEREST, "board_id", "b1"
        )
        assert package.variants[Platform.PINTEREST].options == {"board_id": "b1"}
        package = post_service.set_option(package, Platform.PINTEREST, "board_id", None)
        assert package.variants[Platform.PINTEREST].options == {}

    def test_toggle(self) -> None:
        package = post_service.toggle(
            _package(Platform.TWITTER, Platform.LINKEDIN), Platform.LINKEDIN, False
        )
        assert list(package.enabled_variants()) == [Platform.TWITTER]

    def test_editing_while_posting_is_rejected(self) -> None:
        package = _package(Platform.TWITTER).model_copy(update={"status": "posting"})
        with pytest.raises(ValueError, match="being published"):
            post_service.set_content(package, Platform.TWITTER, "late edit")

    def test_editing_published_variant_is_rejected(self) -> None:
        package = _package(Platform.TWITTER, Platform.LINKEDIN)
        variants = dict(package.variants)
        variants[Platform.TWITTER] = PostVariant(content="done", status="success")
        variants[Platform.LINKEDIN] = PostVariant(content="retry me", status="failed")
        package = package.model_copy(update={"variants": variants, "status": "partial"})

        with pytest.raises(ValueError, match="already published"):
            post_service.set_content(package, Platform.TWITTER, "changed")
        fixed = post_service.set_content(package, Platform.LINKEDIN, "fixed")
        assert fixed.variants[Platform.LINKEDIN].content == "fixed"
        assert fixed.status == "partial"

    def test_disabling_failed_variant_recomputes_status(self) -> None:
        package = _package(Platform.TWITTER, Platform.LINKEDIN)
        variants = {
            Platform.TWITTER: PostVariant(content="a", status="success"),
            Platform.LINKEDIN: PostVariant(content="b", status="failed"),
        }
        package = package.model_copy(update={"variants": variants, "status": "partial"})
        assert post_service.toggle(package, Platform.LINKEDIN, False).status == "success"


class TestValidate:
    def test_disabled_variant_is_skipped(self) -> None:
        variant = PostVariant(enabled=False, content="x" * 1000, media=("a",) * 20)
        result = validate(variant, Platform.TWITTER)
        assert result.is_valid
        assert result.errors == ()

    def test_twitter_at_limit_is_valid(self) -> None:
        assert validate(PostVariant(content="x" * 280), Platform.TWITTER).is_valid

    def test_twitter_over_limit(self) -> None:
        result = validate(PostVariant(content="x" * 281), Platform.TWITTER)
        assert not result.is_valid
        assert result.errors == (ErrorKind.CONTENT_TOO_LONG,)
        assert "281" in result.messages[0]
        assert "280" in result.messages[0]

    def test_linkedin_over_limit(self) -> None:
        result = validate(PostVariant(content="x" * 3001), Platform.LINKEDIN)
        assert result.errors == (ErrorKind.CONTENT_TOO_LONG,)

    def test_error_precedence(self) -> None:
        variant = PostVariant(content="x" * 300, media=tuple(f"m{i}" for i in range(5)))
        result = validate(variant, Platform.TWITTER)
        assert result.errors == (ErrorKind.CONTENT_TOO_LONG, ErrorKind.TOO_MANY_MEDIA)
        assert len(result.messages) == 2

    def test_blank_text_is_missing(self) -> None:
        result = validate(PostVariant(content="   "), Platform.BLUESKY)
        assert result.errors == (ErrorKind.MISSING_REQUIRED_FIELD,)

    def test_pinterest_required_fields(self) -> None:
        result = validate(PostVariant(content="pin"), Platform.PINTEREST)
        assert result.errors == (ErrorKind.MISSING_REQUIRED_FIELD,)
        assert result.messages == ("Pinterest requires: board_id, image, title",)

    def test_pinterest_complete(self) -> None:
        variant = PostVariant(
            media=("https://cdn/pin.jpg",), options={"board_id": "b1", "title": "Tea"}
        )
        assert validate(variant, Platform.PINTEREST).is_valid

    def test_instagram_needs_media_not_caption(self) -> None:
        assert not validate(PostVariant(content="caption"), Platform.INSTAGRAM).is_valid
        assert validate(PostVariant(media=("https://cdn/a.jpg",)), Platform.INSTAGRAM).is_valid

    @pytest.mark.parametrize("platform", [Platform.TIKTOK, Platform.YOUTUBE])
    def test_video_platforms_need_video_url(self, platform: Platform) -> None:
        result = validate(PostVariant(content="watch", media=("  ",)), platform)
        assert result.errors == (ErrorKind.MISSING_REQUIRED_FIELD,)
        assert "video_url" in result.messages[0]
        assert validate(PostVariant(media=("https://cdn/v.mp4",)), platform).is_valid

    def test_bluesky_counts_graphemes(self) -> None:
        thumbs = "\U0001f44d\U0001f3fd"
        assert validate(PostVariant(content=thumbs * 300), Platform.BLUESKY).is_valid
        result = validate(PostVariant(content=thumbs * 301), Platform.BLUESKY)
        assert result.errors == (ErrorKind.CONTENT_TOO_LONG,)

    def test_validate_package_covers_enabled_variants_only(self) -> None:
        package = _package(Platform.TWITTER, Platform.LINKEDIN)
        package = post_service.toggle(package, Platform.LINKEDIN, False)
        results = post_service.validate_package(package)
        assert list(results) == [Platform.TWITTER]
        assert not results[Platform.TWITTER].is_valid


class TestDeriveStatus:
    @pytest.mark.parametrize(
        ("statuses", "expected"),
        [
            ([], "draft"),
            ([None, None], "draft"),
            (["success", "success"], "success"),
            (["failed", "failed"], "failed"),
            (["success", "failed"], "partial"),
            (["success", "pending"], "posting"),
            (["posting", "failed"], "posting"),
            ([None, "success"], "success"),
        ],
    )
    def test_table(self, statuses: list, expected: str) -> None:
        assert derive_status(statuses) == expected

    def test_disabled_variants_do_not_count(self) -> None:
        variants = [
            PostVariant(status="success"),
            PostVariant(enabled=False, status="failed"),
        ]
        assert package_status(variants) == "success"
