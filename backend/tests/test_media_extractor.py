"""Tests for image extraction from feed media fields."""

import pytest
from newshub.schemas.feed_item import RawFeedItem
from newshub.services.media_extractor import extract_image


@pytest.mark.unit
class TestExtractImage:
    """Test extract_image() precedence and shape handling."""

    def test_image_enclosure_wins(self):
        item = RawFeedItem(
            enclosure={"url": "https://img.example.com/enc.jpg", "type": "image/jpeg"},
            media_content=[{"url": "https://img.example.com/media.jpg"}],
        )
        assert extract_image(item) == "https://img.example.com/enc.jpg"

    def test_non_image_enclosure_ignored(self):
        item = RawFeedItem(
            enclosure=[{"href": "https://cdn.example.com/episode.mp3", "type": "audio/mpeg"}],
            media_thumbnail=[{"url": "https://img.example.com/thumb.jpg"}],
        )
        assert extract_image(item) == "https://img.example.com/thumb.jpg"

    def test_enclosure_list_with_href(self):
        item = RawFeedItem(
            enclosure=[
                {"href": "https://cdn.example.com/a.mp3", "type": "audio/mpeg"},
                {"href": "https://img.example.com/b.png", "type": "image/png"},
            ]
        )
        assert extract_image(item) == "https://img.example.com/b.png"

    def test_media_content_list_first_url(self):
        item = RawFeedItem(
            media_content=[{"medium": "image"}, {"url": "https://img.example.com/2.jpg"}]
        )
        assert extract_image(item) == "https://img.example.com/2.jpg"

    def test_media_content_attribute_bag(self):
        item = RawFeedItem(media_content={"$": {"url": "https://img.example.com/x.jpg"}})
        assert extract_image(item) == "https://img.example.com/x.jpg"

    def test_media_content_without_url_falls_through(self):
        item = RawFeedItem(
            media_content={"medium": "image"},
            media_thumbnail="https://img.example.com/thumb.jpg",
        )
        assert extract_image(item) == "https://img.example.com/thumb.jpg"

    def test_generic_image_field(self):
        assert extract_image(RawFeedItem(image="https://img.example.com/i.jpg")) == (
            "https://img.example.com/i.jpg"
        )
        assert extract_image(RawFeedItem(image={"href": "https://img.example.com/h.jpg"})) == (
            "https://img.example.com/h.jpg"
        )

    def test_no_media_returns_none(self):
        assert extract_image(RawFeedItem(title="No media")) is None

    def test_malformed_values_return_none(self):
        item = RawFeedItem(
            enclosure="not-a-dict",
            media_content=[42, None],
            media_thumbnail={"url": ["nested"]},
            image=3.14,
        )
        assert extract_image(item) is None

    def test_blank_url_ignored(self):
        item = RawFeedItem(
            media_content=[{"url": "   "}], image="https://img.example.com/ok.jpg"
        )
        assert extract_image(item) == "https://img.example.com/ok.jpg"
