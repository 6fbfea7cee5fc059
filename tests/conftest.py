"""Shared HTML fixtures for the extractor and API tests."""
import httpx
import pytest

LISTING_UUID = "0a1b2c3d-4e5f-6a7b-8c9d-0e1f2a3b4c5d"
IMAGE_HOST = "https://alaps-photos-kr.kcdn.kz"
LISTING_URL = "https://krisha.kz/a/show/1001605848"


def make_card(
    listing_id="1001605848",
    uuid=LISTING_UUID,
    title="2-комнатная квартира, 45 м², 3/9 этаж",
    price="15 000 000 ₸",
    classes="a-card",
    body="",
):
    attrs = ""
    if listing_id is not None:
        attrs += f' data-id="{listing_id}"'
    if uuid is not None:
        attrs += f' data-uuid="{uuid}"'
    title_html = f'<a class="a-card__title" href="/a/show/{listing_id}">{title}</a>' if title else ""
    price_html = f'<div class="a-card__price">{price}</div>' if price else ""
    return f'<div class="{classes}"{attrs}>{title_html}{price_html}{body}</div>'


def make_results_page(cards="", extra="", head=""):
    return (
        f"<html><head>{head}</head><body>"
        f'<section class="a-list">{cards}</section>{extra}'
        "</body></html>"
    )


def make_detail_page(
    title="2-комнатная квартира, 65 м², 5/12 этаж",
    price="32 500 000 ₸",
    head=None,
    body="",
):
    if head is None:
        head = f'<meta property="og:image" content="{IMAGE_HOST}/webp/0a/{LISTING_UUID}/1-750x470.webp">'
    title_html = f'<div class="offer__advert-title"><h1>{title}</h1></div>' if title else ""
    price_html = f'<div class="offer__price">{price}</div>' if price else ""
    return f"<html><head>{head}</head><body>{title_html}{price_html}{body}</body></html>"


ANALYTICS_HTML = """
<div class="price-analysis">
  <div><span class="green-price">500 000 ₸</span> за м² у этого объявления</div>
  <div><span class="blue-price">450 000 ₸</span> за м² у похожих в районе</div>
  <div><span class="city-price">430 000 ₸</span> за м² у похожих в городе</div>
  <div class="percent">На 11% дороже</div>
</div>
"""


def mock_transport(routes):
    """
    MockTransport answering by URL path.
    
    ``routes`` maps a path prefix to (status, body) or to an exception class.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        for prefix, answer in routes.items():
            if request.url.path.startswith(prefix):
                if isinstance(answer, type) and issubclass(answer, Exception):
                    raise answer("simulated failure", request=request)
                status, body = answer
                return httpx.Response(status, text=body, request=request)
        return httpx.Response(404, text="not found", request=request)
    
    return httpx.MockTransport(handler)


@pytest.fixture
def detail_page():
    body = """
    <div class="offer__info-item">
      <div class="offer__info-title">Город</div>
      <div class="offer__advert-short-info">Астана,
          Есильский р-н</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Тип дома</div>
      <div class="offer__advert-short-info">монолитный</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Жилой комплекс</div>
      <div class="offer__advert-short-info"><a href="/complex/1">Highvill</a> Astana</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Год постройки</div>
      <div class="offer__advert-short-info">2019</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Этаж</div>
      <div class="offer__advert-short-info">5 из 12</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Площадь, м²</div>
      <div class="offer__advert-short-info">65 м²</div>
    </div>
    <div class="offer__info-item">
      <div class="offer__info-title">Балкон</div>
      <div class="offer__advert-short-info">лоджия</div>
    </div>
    <div class="offer__parameters">
      <dl><dt>Высота потолков</dt><dd>3 м</dd></dl>
      <dl><dt>Балкон остеклён</dt><dd>да</dd></dl>
      <dl><dt>Квартира меблирована</dt><dd>полностью</dd></dl>
      <dl><dt>Пол</dt><dd>ламинат</dd></dl>
      <dl><dt>Санузел</dt><dd>раздельный</dd></dl>
    </div>
    <div class="js-description">Светлая   квартира
        с видом на парк.</div>
    <div class="paid-labels"><span class="paid-labels__item">Горячее</span>
      <span class="paid-labels__item">Пол: ламинат</span></div>
    <div class="owners__name">Айгуль</div>
    <div class="label-user-agent">Специалист</div>
    <div class="a-phones"><span class="phone">+7 701 000 00 00</span></div>
    <div id="a-nb-views"><strong>1 204</strong></div>
    <div class="gallery__small-item" data-photo-url="%(host)s/webp/0a/%(uuid)s/3-120x90.webp"></div>
    <div class="gallery__small-item" data-photo-url="%(host)s/webp/0a/%(uuid)s/1-120x90.webp"></div>
    <div class="gallery__small-item" data-photo-url="%(host)s/webp/0a/%(uuid)s/2-120x90.webp"></div>
    """ % {"host": IMAGE_HOST, "uuid": LISTING_UUID}
    return make_detail_page(body=body)


class FakeFetch:
    """Analytics fetcher stand-in: records calls, returns a canned body."""
    
    def __init__(self, body):
        self.body = body
        self.calls = []
    
    async def __call__(self, advert_id, referer):
        self.calls.append((advert_id, referer))
        return self.body
