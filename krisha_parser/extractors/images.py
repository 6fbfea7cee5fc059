"""
Image URL resolution for listing detail pages.

The gallery markup is unreliable, so the preferred path rebuilds canonical
CDN URLs from the uuid and path prefix embedded in the preview image meta
tag. Only when that fails are gallery sources read literally.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Set

from bs4 import BeautifulSoup, Tag

from krisha_parser.config import config
from krisha_parser.extractors.fields import absolutize
from krisha_parser.models.listing import ImageVariants

UUID_RE = re.compile(
    r"/([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})/", re.IGNORECASE
)
PREFIX_RE = re.compile(r"/webp/([^/]+)/")
IMAGE_INDEX_RE = re.compile(r"/(\d+)-[^/]*$")
SIZE_SUFFIX_RE = re.compile(r"-(?:\d+x\d+|full)\.(webp|jpg|jpeg)")

DEFAULT_INDICES = range(1, 16)
UNKNOWN_INDEX = 999

SIZE_MAP = {
    "thumb": "120x90",
    "medium": "280x175",
    "large": "750x470",
    "full": "full",
}

# Regions scanned for image indices belonging to the listing uuid
INDEX_SELECTORS = [
    ".gallery__small-item img",
    ".gallery__main img",
    ".gallery__small-item",
    "picture source",
    "[data-photo-url]",
]

# Regions read literally when no uuid is available
GALLERY_SELECTORS = [
    ".gallery__small-item img",
    ".gallery__main img",
    "picture source",
]


@dataclass
class ImageResolution:
    """Resolved image URLs and the path that produced them."""
    images: List[str]
    source: str  # "meta_uuid", "gallery_markup" or "none"
    uuid: Optional[str] = None
    prefix: Optional[str] = None


def convert_image_url(url: str, size: str = "full") -> str:
    """Rewrite a CDN URL to another size rendition (-<W>x<H>. or -full. -> -<size>.)."""
    if not url or config.LISTING_IMAGE_HOST not in url:
        return url
    return SIZE_SUFFIX_RE.sub(lambda m: f"-{SIZE_MAP[size]}.{m.group(1)}", url, count=1)


def generate_image_url(prefix: str, uuid: str, index: int, size: str = "full") -> str:
    return f"https://{config.LISTING_IMAGE_HOST}/webp/{prefix}/{uuid}/{index}-{size}.webp"


def image_index(url: str) -> int:
    match = IMAGE_INDEX_RE.search(url)
    return int(match.group(1)) if match else UNKNOWN_INDEX


def _element_source(element: Tag) -> str:
    src = element.get("src") or element.get("data-src") or element.get("data-photo-url")
    if not src and element.get("srcset"):
        src = element["srcset"].split(",")[0].strip().split(" ")[0]
    return src or ""


def find_preview_image(soup: BeautifulSoup) -> str:
    """Preview image URL from meta tags, in precedence order."""
    candidates = [
        soup.select_one('meta[property="og:image"]'),
        soup.select_one('meta[name="og:image"]'),
        soup.select_one('head meta[property="og:image"]'),
    ]
    for meta in candidates:
        if meta is not None and meta.get("content"):
            return meta["content"]
    
    for meta in soup.find_all("meta"):
        content = meta.get("content") or ""
        if config.LISTING_IMAGE_HOST in content:
            return content
    return ""


def collect_indices(soup: BeautifulSoup, uuid: str) -> Set[int]:
    """Image indices referenced by gallery markup for this uuid."""
    indices = set()
    for selector in INDEX_SELECTORS:
        for element in soup.select(selector):
            src = _element_source(element)
            if uuid not in src:
                continue
            match = IMAGE_INDEX_RE.search(src)
            if match:
                indices.add(int(match.group(1)))
    return indices


def images_from_uuid(prefix: str, uuid: str, indices: Set[int]) -> List[str]:
    return [generate_image_url(prefix, uuid, index) for index in sorted(indices)]


def images_from_gallery(soup: BeautifulSoup) -> List[str]:
    """Literal gallery sources on the image host, rewritten to full size."""
    sources: List[str] = []
    for selector in GALLERY_SELECTORS:
        sources.extend(_element_source(element) for element in soup.select(selector))
    sources.extend(
        element.get("data-photo-url") or ""
        for element in soup.select(".gallery__small-item[data-photo-url]")
    )
    
    images: List[str] = []
    for src in sources:
        if not src or config.LISTING_IMAGE_HOST not in src:
            continue
        full = convert_image_url(absolutize(src), "full")
        if full not in images:
            images.append(full)
    
    return sorted(images, key=image_index)


def resolve_images(soup: BeautifulSoup) -> ImageResolution:
    preview = find_preview_image(soup)
    uuid_match = UUID_RE.search(preview) if preview else None
    prefix_match = PREFIX_RE.search(preview) if preview else None
    
    if uuid_match and prefix_match:
        uuid, prefix = uuid_match.group(1), prefix_match.group(1)
        indices = collect_indices(soup, uuid) or set(DEFAULT_INDICES)
        return ImageResolution(
            images=images_from_uuid(prefix, uuid, indices),
            source="meta_uuid",
            uuid=uuid,
            prefix=prefix,
        )
    
    images = images_from_gallery(soup)
    return ImageResolution(images=images, source="gallery_markup" if images else "none")


def build_image_variants(images: List[str]) -> Optional[ImageVariants]:
    """Size renditions of the first image, or None without images."""
    if not images:
        return None
    first = images[0]
    return ImageVariants(**{size: convert_image_url(first, size) for size in SIZE_MAP})
