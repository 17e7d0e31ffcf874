"""
Product API client.

Wraps the hstockplus admin API (v2) behind one class:

    api = ProductApi(os.environ["PRODUCT_API_KEY"])
    console.attach(api)                        # optional: print request logs

    uploaded = await api.upload_image(image_url="https://example.com/a.jpg")
    if uploaded.success:
        image_path = uploaded.data["imagePath"]

    result = await api.add_product({...})
    products = await api.get_products(product_type="auto,manual", limit=20)
    deleted = await api.delete_product(1001)

Errors come in two tiers:
    - ValidationError is raised immediately for bad input, before any request.
    - Server, network and setup failures are returned as a ResultEnvelope with
      success=False. Branch on result.success, not on exceptions.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import httpx

from product_api.errors import ValidationError
from product_api.http_utils import API_KEY_HEADER, RequestSpec, ResultEnvelope, execute
from product_api.models import ImageUpload, ProductInput, ProductQuery
from utils.events import EventEmitter

DEFAULT_BASE_URL = "https://hstockplus.com/api/admin/v2"


class ProductApi(EventEmitter):
    """Client for product catalog management via API key.

    Events (see product_api.http_utils):
        - request_log: before each request, API key masked
        - response_log: after a 2xx response
        - error_log: after any failure
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValidationError("api_key is required", field="api_key")
        if any(ord(c) < 32 or ord(c) == 127 for c in api_key):
            raise ValidationError("api_key must not contain control characters", field="api_key")
        self.__init_events__()
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    @classmethod
    def from_config(cls, config: dict, **kwargs) -> "ProductApi":
        """Build a client from a loaded config (see config.load_config)."""
        api_config = config.get("api", {})
        return cls(
            api_config.get("key", ""),
            base_url=api_config.get("base_url") or DEFAULT_BASE_URL,
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"ProductApi(base_url={self.base_url!r})"

    def headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self._api_key,
            "Content-Type": "application/json",
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> ResultEnvelope:
        """Send one request to base_url + path and normalize the result."""
        spec = RequestSpec(
            method=method,
            url=f"{self.base_url}{path}",
            headers=self.headers(),
            body=body,
            params=params,
        )
        return await execute(spec, emitter=self, transport=self._transport)

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    async def upload_image(
        self,
        upload: ImageUpload | None = None,
        *,
        image_url: str | None = None,
        image_base64: str | None = None,
    ) -> ResultEnvelope:
        """Upload an image from a URL or a base64 data URL (max 5MB).

        Args:
            upload: An ImageUpload, or pass image_url / image_base64 directly.
            image_url: Image the server downloads, e.g. https://example.com/image.jpg
            image_base64: Data URL, e.g. data:image/jpeg;base64,/9j/4AAQSkZJRg...

        Returns:
            ResultEnvelope; on success data["imagePath"] is the path to use as
            ProductInput.image.
        """
        if upload is None:
            upload = ImageUpload(image_url=image_url, image_base64=image_base64)
        elif image_url is not None or image_base64 is not None:
            raise ValidationError("Pass either an ImageUpload or image_url/image_base64, not both")
        upload.validate()
        return await self.request("POST", "/upload-image", body=upload.to_payload())

    async def add_product(self, product: ProductInput | Mapping[str, Any]) -> ResultEnvelope:
        """Add a product, or update it if its source_product_id already exists.

        Args:
            product: ProductInput, or a dict using the API's camelCase field
                     names (snake_case names are accepted too).
        """
        if not isinstance(product, ProductInput):
            if not isinstance(product, Mapping):
                raise ValidationError(
                    f"product must be a ProductInput or a mapping, got {type(product).__name__}"
                )
            product = ProductInput.from_dict(product)
        product.validate()
        return await self.request("POST", "/products", body=product.to_payload())

    async def get_products(
        self,
        query: ProductQuery | None = None,
        *,
        product_type: str | Sequence[str] = "auto",
        is_active: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> ResultEnvelope:
        """List products.

        Args:
            query: A ProductQuery, or pass the fields directly.
            product_type: "auto", "manual", "inventory", or several joined by commas.
            is_active: Only active (True) or inactive (False) products.
            limit: Page size.
            offset: Items to skip.

        Returns:
            ResultEnvelope; on success data is {"products": [...], "count", "total"}.
        """
        if query is None:
            query = ProductQuery(
                product_type=product_type,
                is_active=is_active,
                limit=limit,
                offset=offset,
            )
        return await self.request("GET", "/products", params=query.to_params())

    async def delete_product(self, friendly_id: int | str) -> ResultEnvelope:
        """Delete a product by its friendly ID (e.g. 1001 or "1001")."""
        if not friendly_id:
            raise ValidationError("friendly_id is required", field="friendly_id")
        return await self.request("DELETE", f"/products/{friendly_id}")
