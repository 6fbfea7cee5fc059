"""Tests for card field extractors."""
from bs4 import BeautifulSoup

from krisha_parser.extractors import fields
from tests.conftest import LISTING_UUID, make_card


def card_of(html):
    return BeautifulSoup(html, "lxml").select_one(".a-card")


class TestImageUrl:
    """Image URL fallback chain."""
    
    def test_built_from_uuid(self):
        card = card_of(make_card())
        assert fields.card_image_url(card) == (
            f"https://alakcell-photos-kr.kcdn.kz/webp/0a/{LISTING_UUID}/1-400x300.webp"
        )
    
    def test_picture_image_when_uuid_missing(self):
        card = card_of(make_card(
            uuid=None,
            body='<picture><img src="//alakcell-photos-kr.kcdn.kz/webp/aa/x/1-280x175.webp"></picture>',
        ))
        assert fields.card_image_url(card) == "https://alakcell-photos-kr.kcdn.kz/webp/aa/x/1-280x175.webp"
    
    def test_any_image_uses_data_src(self):
        card = card_of(make_card(
            uuid=None,
            body='<img data-src="https://alakcell-photos-kr.kcdn.kz/webp/bb/y/1-280x175.webp">',
        ))
        assert fields.card_image_url(card) == "https://alakcell-photos-kr.kcdn.kz/webp/bb/y/1-280x175.webp"
    
    def test_foreign_host_ignored(self):
        card = card_of(make_card(uuid=None, body='<img src="https://cdn.example.com/a.jpg">'))
        assert fields.card_image_url(card) == ""


class TestFeatures:
    """Feature tags from the four badge sources."""
    
    def test_sources_in_order_without_duplicates(self):
        body = (
            '<span class="paid-icon"><span class="kr-tooltip__title">Горячее</span></span>'
            '<span class="credit-badge">Ипотека</span>'
            '<span class="credit-badge">Ипотека</span>'
            '<span class="a-is-mortgaged">В залоге</span>'
            '<span class="a-card__complex-label">Новостройка</span>'
        )
        card = card_of(make_card(body=body))
        assert fields.card_features(card) == ["Горячее", "Ипотека", "В залоге", "Новостройка"]
    
    def test_no_badges(self):
        assert fields.card_features(card_of(make_card())) == []


class TestTitleDerivedFields:
    
    def test_area_and_floor(self):
        assert fields.area_floor_from_title("2-комнатная, 45 м², 3/9 этаж") == ("45 м²", "3/9")
    
    def test_decimal_area(self):
        assert fields.area_floor_from_title("1-комнатная, 38.5 м², 10/16 этаж") == ("38.5 м²", "10/16")
    
    def test_no_match(self):
        assert fields.area_floor_from_title("Студия у парка") == ("", "")


class TestCardFlags:
    
    def test_advertisement_by_class(self):
        assert fields.is_advertisement(card_of(make_card(classes="a-card ddl_campaign")))
    
    def test_advertisement_by_adfox(self):
        assert fields.is_advertisement(card_of(make_card(body='<div class="adfox"></div>')))
    
    def test_regular_card_is_not_advertisement(self):
        assert not fields.is_advertisement(card_of(make_card()))
    
    def test_urgent_by_class(self):
        assert fields.card_is_urgent(card_of(make_card(classes="a-card is-urgent")))
    
    def test_urgent_by_label(self):
        card = card_of(make_card(body='<span class="a-card__label">Срочно!</span>'))
        assert fields.card_is_urgent(card)
    
    def test_views_default_to_zero(self):
        assert fields.card_views(card_of(make_card())) == "0"
    
    def test_identifiers_require_both(self):
        assert fields.card_identifiers(card_of(make_card(uuid=None))) is None
        assert fields.card_identifiers(card_of(make_card())) == ("1001605848", LISTING_UUID)
