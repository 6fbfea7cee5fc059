"""Tests for the card and listing page extractors."""
from krisha_parser.extractors.listing_page import extract_listing_page
from tests.conftest import LISTING_UUID, make_card, make_results_page


class TestSingleCard:
    
    def test_minimal_card_round_trip(self):
        page = make_results_page(make_card(title="2-комнатная, 45 м², 3/9 этаж"))
        result = extract_listing_page(page)
        
        assert len(result.summaries) == 1
        summary = result.summaries[0]
        assert summary.id == "1001605848"
        assert summary.uuid == LISTING_UUID
        assert summary.title == "2-комнатная, 45 м², 3/9 этаж"
        assert summary.price == "15 000 000 ₸"
        assert summary.area == "45 м²"
        assert summary.floor == "3/9"
        assert summary.views == "0"
        assert summary.url == "/a/show/1001605848"
        assert summary.is_urgent is False
    
    def test_whitespace_collapsed(self):
        card = make_card(
            price="15\n  000   000 ₸",
            body='<div class="a-card__subtitle">\n Астана,\n  Есильский р-н </div>',
        )
        summary = extract_listing_page(make_results_page(card)).summaries[0]
        assert summary.price == "15 000 000 ₸"
        assert summary.address == "Астана, Есильский р-н"
    
    def test_description_truncated_after_collapse(self):
        description = "\n".join(["квартира   у   парка"] * 40)
        card = make_card(body=f'<div class="a-card__text-preview">{description}</div>')
        summary = extract_listing_page(make_results_page(card)).summaries[0]
        
        assert len(summary.description) == 200
        assert "  " not in summary.description
        assert summary.description.startswith("квартира у парка квартира")


class TestDroppedCards:
    """Incomplete cards are skipped, never raised."""
    
    def test_missing_uuid(self):
        result = extract_listing_page(make_results_page(make_card(uuid=None)))
        assert result.summaries == []
        assert result.skipped[0].reason == "missing_identifier"
    
    def test_missing_id(self):
        result = extract_listing_page(make_results_page(make_card(listing_id=None)))
        assert result.summaries == []
        assert len(result.skipped) == 1
    
    def test_missing_price(self):
        result = extract_listing_page(make_results_page(make_card(price="")))
        assert result.summaries == []
        assert result.skipped[0].reason == "missing_title_or_price"
    
    def test_bad_card_does_not_abort_batch(self):
        cards = (
            make_card(listing_id="1", uuid=None)
            + make_card(listing_id="2")
            + make_card(listing_id="3", title="")
            + make_card(listing_id="4")
        )
        result = extract_listing_page(make_results_page(cards))
        assert [s.id for s in result.summaries] == ["2", "4"]
        assert [s.card_id for s in result.skipped] == ["1", "3"]
    
    def test_advertisements_skipped(self):
        cards = make_card(classes="a-card ddl_campaign") + make_card(listing_id="7")
        result = extract_listing_page(make_results_page(cards))
        assert [s.id for s in result.summaries] == ["7"]
        assert result.advertisements == 1
        assert result.skipped == []


class TestPageMetadata:
    
    def test_total_from_subtitle(self):
        page = make_results_page(
            make_card(),
            extra='<div class="a-search-subtitle">Найдено 9 778 объявлений</div>',
        )
        result = extract_listing_page(page)
        assert result.total_found == 9778
        assert result.total_source == "subtitle"
    
    def test_empty_page(self):
        result = extract_listing_page(make_results_page())
        assert result.summaries == []
        assert result.pagination.total_pages == 1
        assert result.pagination.has_next_page is False
        assert result.total_found == 0
