"""
Input models for the product API endpoints.

Each endpoint takes an explicit dataclass instead of a loose dict. The
dataclasses check their own required fields (validate) and produce the
camelCase wire payload (to_payload). from_dict accepts either the wire
names or the snake_case attribute names, so JSON files written against the
API docs load as-is.
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from product_api.errors import ValidationError

MAX_IMAGE_BYTES = 5 * 1024 * 1024
DEFAULT_WARRANTY_DAYS = 7


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (even if its value is falsy)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _require(value: Any, name: str):
    if not value:
        raise ValidationError(f"{name} is required", field=name)


# =============================================================================
# Image upload
# =============================================================================


def image_to_data_url(path: str | Path) -> str:
    """Read an image file and encode it as a data URL.

    Args:
        path: Image file on disk.

    Returns:
        "data:<mime>;base64,<payload>"

    Raises:
        ValidationError: file missing, not an image, or over the 5MB upload limit.
    """
    path = Path(path)
    if not path.is_file():
        raise ValidationError(f"Image file not found: {path}", field="imageBase64")

    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(f"Not an image file: {path.name}", field="imageBase64")

    size = path.stat().st_size
    if size > MAX_IMAGE_BYTES:
        raise ValidationError(
            f"Image is {size / 1024 / 1024:.2f} MB; the upload limit is 5 MB",
            field="imageBase64",
        )

    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


@dataclass(frozen=True)
class ImageUpload:
    """Source for POST /upload-image. At least one field must be set."""

    image_url: str | None = None
    image_base64: str | None = None

    @classmethod
    def from_source(cls, source: str) -> "ImageUpload":
        """Build from a URL, a data URL, or a local file path."""
        if source.startswith(("http://", "https://")):
            return cls(image_url=source)
        if source.startswith("data:"):
            return cls(image_base64=source)
        return cls(image_base64=image_to_data_url(source))

    def validate(self):
        if not self.image_url and not self.image_base64:
            raise ValidationError("Either image_url or image_base64 must be provided")

    def to_payload(self) -> dict[str, str]:
        payload = {}
        if self.image_url:
            payload["imageUrl"] = self.image_url
        if self.image_base64:
            payload["imageBase64"] = self.image_base64
        return payload


# =============================================================================
# Products
# =============================================================================


@dataclass(frozen=True)
class Subproduct:
    """A priced, stocked variant of a product.

    price and stock are only rejected when missing; stock=0 disables the
    variant and is valid.
    """

    source_product_id: str | None = None
    source_name: str | None = None
    price: float | None = None
    stock: int | None = None
    name: str | None = None
    min_quantity: int | None = None
    short_description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Subproduct":
        return cls(
            source_product_id=_pick(data, "sourceProductId", "source_product_id"),
            source_name=_pick(data, "sourceName", "source_name"),
            price=_pick(data, "price"),
            stock=_pick(data, "stock"),
            name=_pick(data, "name"),
            min_quantity=_pick(data, "minQuantity", "min_quantity"),
            short_description=_pick(data, "shortDescription", "short_description"),
        )

    def validate(self):
        _require(self.source_product_id, "subproduct.sourceProductId")
        _require(self.source_name, "subproduct.sourceName")
        if self.price is None:
            raise ValidationError("subproduct.price is required", field="subproduct.price")
        if self.stock is None:
            raise ValidationError("subproduct.stock is required", field="subproduct.stock")

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "sourceProductId": self.source_product_id,
            "sourceName": self.source_name,
            "price": self.price,
            "stock": self.stock,
        }
        if self.name is not None:
            payload["name"] = self.name
        if self.min_quantity is not None:
            payload["minQuantity"] = self.min_quantity
        if self.short_description is not None:
            payload["shortDescription"] = self.short_description
        return payload


@dataclass(frozen=True)
class ProductInput:
    """Body of POST /products.

    The server upserts by source_product_id. On update an empty image leaves
    the stored image unchanged, which is why image is only sent when set.
    """

    category_name: str | None = None
    subcategory_name: str | None = None
    source_product_id: str | None = None
    name: str | None = None
    subproducts: Sequence[Subproduct] = field(default_factory=tuple)
    source_url: str | None = None
    provider: str | None = None
    description: str | None = None
    description_text: str | None = None
    image: str | None = None
    warranty_days: int = DEFAULT_WARRANTY_DAYS
    active: bool = True
    product_type: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductInput":
        raw_subproducts = _pick(data, "subproducts")
        if raw_subproducts is None or isinstance(raw_subproducts, (str, bytes, Mapping)):
            subproducts = raw_subproducts
        else:
            subproducts = tuple(
                Subproduct.from_dict(item) if isinstance(item, Mapping) else item
                for item in raw_subproducts
            )

        warranty_days = _pick(data, "warrantyDays", "warranty_days")
        active = _pick(data, "active")
        return cls(
            category_name=_pick(data, "categoryName", "category_name"),
            subcategory_name=_pick(data, "subcategoryName", "subcategory_name"),
            source_product_id=_pick(data, "sourceProductId", "source_product_id"),
            name=_pick(data, "name"),
            subproducts=subproducts,
            source_url=_pick(data, "sourceUrl", "source_url"),
            provider=_pick(data, "provider"),
            description=_pick(data, "description"),
            description_text=_pick(data, "descriptionText", "description_text"),
            image=_pick(data, "image"),
            warranty_days=DEFAULT_WARRANTY_DAYS if warranty_days is None else warranty_days,
            active=True if active is None else active,
            product_type=_pick(data, "productType", "product_type"),
        )

    def validate(self):
        _require(self.category_name, "categoryName")
        _require(self.subcategory_name, "subcategoryName")
        _require(self.source_product_id, "sourceProductId")
        _require(self.name, "name")

        subproducts = self.subproducts
        if (
            not subproducts
            or isinstance(subproducts, (str, bytes, Mapping))
            or not isinstance(subproducts, Sequence)
        ):
            raise ValidationError(
                "subproducts is required and must contain at least one subproduct",
                field="subproducts",
            )
        for subproduct in subproducts:
            if not isinstance(subproduct, Subproduct):
                raise ValidationError(
                    f"subproducts entries must be Subproduct, got {type(subproduct).__name__}",
                    field="subproducts",
                )
            subproduct.validate()

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "categoryName": self.category_name,
            "subcategoryName": self.subcategory_name,
            "sourceProductId": self.source_product_id,
            "name": self.name,
            "subproducts": [s.to_payload() for s in self.subproducts],
        }
        optional = {
            "sourceUrl": self.source_url,
            "provider": self.provider,
            "description": self.description,
            "descriptionText": self.description_text,
            "image": self.image,
        }
        payload.update({k: v for k, v in optional.items() if v})
        payload["warrantyDays"] = self.warranty_days
        payload["active"] = self.active
        if self.product_type:
            payload["productType"] = self.product_type
        return payload


@dataclass(frozen=True)
class ProductQuery:
    """Query for GET /products.

    product_type is one type or several joined by commas
    ("auto,manual,inventory"); a list of types is joined for you.
    """

    product_type: str | Sequence[str] = "auto"
    is_active: bool = True
    limit: int = 50
    offset: int = 0

    def to_params(self) -> dict[str, Any]:
        product_type = self.product_type
        if not isinstance(product_type, str):
            product_type = ",".join(product_type)
        return {
            "productType": product_type,
            "isActive": str(self.is_active).lower(),
            "limit": self.limit,
            "offset": self.offset,
        }
