# Overview: Typed records for semi-structured JSON attachments.

"""
JSON attachments (brand address, social links, certifications, page and QR
settings, file metadata, ...) are stored as opaque JSON. Their shape is
checked here, at the write boundary, so that everything in the store has a
known structure.

Each record is a dataclass. ``Record.parse`` accepts a decoded JSON object,
coerces each declared field, rejects unknown keys and returns the record;
``to_json`` returns the normalized dict that gets stored (None values are
dropped). camelCase keys sent by the frontend are accepted through ALIASES.
"""
from __future__ import annotations

import dataclasses
import re
import typing
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional

from .errors import ValidationError


HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _is_optional(tp) -> tuple[bool, Any]:
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return True, args[0]
    return False, tp


def _coerce(value: Any, tp, path: str):
    if tp is str:
        if not isinstance(value, str):
            raise ValidationError(f"{path} must be a string")
        return value.strip()
    if tp is bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{path} must be true or false")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{path} must be an integer")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{path} must be a number")
        return float(value)
    if typing.get_origin(tp) in (list, List):
        (item_tp,) = typing.get_args(tp)
        if not isinstance(value, list):
            raise ValidationError(f"{path} must be a list")
        items = [_coerce(item, item_tp, f"{path}[{i}]") for i, item in enumerate(value)]
        if item_tp is str:
            items = [item for item in items if item]
        return items
    raise TypeError(f"Unsupported attachment field type {tp!r}")


class Record:
    ALIASES: ClassVar[dict] = {}

    @classmethod
    def parse(cls, value: Any, path: str = ""):
        path = path or cls.__name__
        if not isinstance(value, dict):
            raise ValidationError(f"{path} must be an object")

        data = {cls.ALIASES.get(k, k): v for k, v in value.items()}
        hints = typing.get_type_hints(cls)
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"{path} has unknown keys: {', '.join(unknown)}")

        kwargs = {}
        for f in dataclasses.fields(cls):
            raw = data.get(f.name)
            _, tp = _is_optional(hints[f.name])
            required = (
                f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            )
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                if required:
                    raise ValidationError(f"{path}.{f.name} is required")
                continue
            kwargs[f.name] = _coerce(raw, tp, f"{path}.{f.name}")

        record = cls(**kwargs)
        record.check(path)
        return record

    def check(self, path: str) -> None:
        """Cross-field rules; overridden by records that have any."""

    def to_json(self) -> dict:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


def _check_color(value: Optional[str], path: str) -> None:
    if value is not None and not HEX_COLOR_RE.match(value):
        raise ValidationError(f"{path} must be a hex color like #1a2b3c")


@dataclass
class Address(Record):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    ALIASES: ClassVar[dict] = {"postalCode": "postal_code", "zip": "postal_code"}


@dataclass
class SocialLinks(Record):
    website: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None


@dataclass
class Certification(Record):
    name: str
    issuer: str
    year: int
    document_url: Optional[str] = None

    ALIASES: ClassVar[dict] = {"documentUrl": "document_url"}

    def check(self, path: str) -> None:
        if self.year < 1800 or self.year > 2100:
            raise ValidationError(f"{path}.year must be between 1800 and 2100")


@dataclass
class Award(Record):
    name: str
    year: Optional[int] = None
    awarded_by: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    ALIASES: ClassVar[dict] = {"awardedBy": "awarded_by", "issuer": "awarded_by", "imageUrl": "image_url"}


@dataclass
class PressFeature(Record):
    title: str
    publication: Optional[str] = None
    url: Optional[str] = None
    published_on: Optional[str] = None

    ALIASES: ClassVar[dict] = {"publishedOn": "published_on", "date": "published_on"}


@dataclass
class FeaturedProduct(Record):
    name: str
    description: Optional[str] = None
    images: List[str] = field(default_factory=list)
    price_cents: Optional[int] = None
    url: Optional[str] = None
    product_id: Optional[int] = None

    ALIASES: ClassVar[dict] = {"priceCents": "price_cents", "productId": "product_id"}

    def check(self, path: str) -> None:
        if self.price_cents is not None and self.price_cents < 0:
            raise ValidationError(f"{path}.price_cents must be >= 0")


@dataclass
class Campaign(Record):
    name: str
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None

    ALIASES: ClassVar[dict] = {
        "title": "name",
        "startDate": "start_date",
        "endDate": "end_date",
        "imageUrl": "image_url",
    }

    def check(self, path: str) -> None:
        # ISO dates compare correctly as strings
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(f"{path}.end_date must not be before start_date")


@dataclass
class BrandSettings(Record):
    theme_color: Optional[str] = None
    accent_color: Optional[str] = None
    font_family: Optional[str] = None
    show_reviews: Optional[bool] = None
    public_profile: Optional[bool] = None

    ALIASES: ClassVar[dict] = {
        "themeColor": "theme_color",
        "accentColor": "accent_color",
        "fontFamily": "font_family",
        "showReviews": "show_reviews",
        "publicProfile": "public_profile",
    }

    def check(self, path: str) -> None:
        _check_color(self.theme_color, f"{path}.theme_color")
        _check_color(self.accent_color, f"{path}.accent_color")


@dataclass
class PageSettings(Record):
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    og_image: Optional[str] = None
    favicon: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    font_family: Optional[str] = None
    custom_css: Optional[str] = None

    ALIASES: ClassVar[dict] = {
        "seoTitle": "seo_title",
        "seoDescription": "seo_description",
        "ogImage": "og_image",
        "backgroundColor": "background_color",
        "textColor": "text_color",
        "fontFamily": "font_family",
        "customCss": "custom_css",
    }

    def check(self, path: str) -> None:
        _check_color(self.background_color, f"{path}.background_color")
        _check_color(self.text_color, f"{path}.text_color")


@dataclass
class QRSettings(Record):
    foreground_color: Optional[str] = None
    background_color: Optional[str] = None
    size: Optional[int] = None
    margin: Optional[int] = None
    error_correction: Optional[str] = None
    logo_url: Optional[str] = None

    ALIASES: ClassVar[dict] = {
        "foregroundColor": "foreground_color",
        "fgColor": "foreground_color",
        "backgroundColor": "background_color",
        "bgColor": "background_color",
        "errorCorrection": "error_correction",
        "logoUrl": "logo_url",
    }

    def check(self, path: str) -> None:
        _check_color(self.foreground_color, f"{path}.foreground_color")
        _check_color(self.background_color, f"{path}.background_color")
        if self.size is not None and not 64 <= self.size <= 4096:
            raise ValidationError(f"{path}.size must be between 64 and 4096")
        if self.margin is not None and not 0 <= self.margin <= 64:
            raise ValidationError(f"{path}.margin must be between 0 and 64")
        if self.error_correction is not None:
            self.error_correction = self.error_correction.upper()
            if self.error_correction not in ("L", "M", "Q", "H"):
                raise ValidationError(f"{path}.error_correction must be one of L, M, Q, H")


@dataclass
class FileMetadata(Record):
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    pages: Optional[int] = None

    def check(self, path: str) -> None:
        for name in ("width", "height", "pages"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValidationError(f"{path}.{name} must be > 0")
        if self.duration is not None and self.duration < 0:
            raise ValidationError(f"{path}.duration must be >= 0")


@dataclass
class CustomerPreferences(Record):
    newsletter: Optional[bool] = None
    language: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    notify_new_launches: Optional[bool] = None

    ALIASES: ClassVar[dict] = {"notifyNewLaunches": "notify_new_launches"}


@dataclass
class Ingredient(Record):
    name: str
    quantity: Optional[str] = None


@dataclass
class EcommerceLink(Record):
    url: str
    platform: Optional[str] = None


@dataclass
class Faq(Record):
    question: str
    answer: str


@dataclass
class ScanLocation(Record):
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None


STRING_LIST = "string_list"

# attachment field -> (record class or STRING_LIST, is_list)
ATTACHMENT_SCHEMAS: dict[str, tuple[Any, bool]] = {
    # brands
    "address": (Address, False),
    "social_links": (SocialLinks, False),
    "certifications": (Certification, True),
    "awards": (Award, True),
    "press_features": (PressFeature, True),
    "featured_products": (FeaturedProduct, True),
    "new_launch_products": (FeaturedProduct, True),
    "campaigns": (Campaign, True),
    "settings": (BrandSettings, False),
    "team_members": (STRING_LIST, True),
    "product_categories": (STRING_LIST, True),
    # products
    "ingredients": (Ingredient, True),
    "product_certifications": (STRING_LIST, True),
    "ecommerce_links": (EcommerceLink, True),
    "faqs": (Faq, True),
    # pages, QR codes, files, reviews, profiles
    "page_settings": (PageSettings, False),
    "qr_settings": (QRSettings, False),
    "file_metadata": (FileMetadata, False),
    "tags": (STRING_LIST, True),
    "images": (STRING_LIST, True),
    "preferences": (CustomerPreferences, False),
    "location": (ScanLocation, False),
}


def parse_attachment(name: str, value: Any, schema: str | None = None):
    """
    Validate one attachment value and return its normalized JSON form.

    ``schema`` selects the registered shape when the column name alone is
    ambiguous (a product's ``certifications`` is a list of strings, a brand's
    is a list of Certification records).
    """
    if value is None:
        return None
    kind, many = ATTACHMENT_SCHEMAS[schema or name]

    if kind == STRING_LIST:
        items = _coerce(value, List[str], name)
        return [item for item in items if item]

    if many:
        if not isinstance(value, list):
            raise ValidationError(f"{name} must be a list")
        return [kind.parse(item, f"{name}[{i}]").to_json() for i, item in enumerate(value)]

    if kind is Address and isinstance(value, str):
        # Single-line addresses from the profile form
        value = {"line1": value}
    return kind.parse(value, name).to_json()


def parse_attachments(patch: dict, schemas: dict[str, str] | None = None) -> dict:
    """Normalize every JSON attachment present in ``patch`` in place."""
    schemas = schemas or {}
    for key in list(patch.keys()):
        schema = schemas.get(key)
        if schema is None and key not in ATTACHMENT_SCHEMAS:
            continue
        patch[key] = parse_attachment(key, patch[key], schema)
    return patch
