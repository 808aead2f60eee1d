# storefront/services/product_client.py
import requests
from requests import RequestException

from storefront.domain.catalog import Product
from storefront.domain.errors import StoreUnavailable
from storefront.utils.retry import http_retry
from storefront.utils.settings import CATALOG_SERVICE_URL, CATALOG_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Catalog lookup po HTTP (serwis katalogu, GET /products/{id})."""

    def __init__(self, base_url: str | None = None, timeout: float = CATALOG_TIMEOUT_SECONDS, session=None):
        self.base_url = (base_url or CATALOG_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @http_retry()
    def fetch_product(self, product_id: int) -> dict | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = self.http.get(url, timeout=self.timeout)
        # 404 = produkt usuniety, to nie jest blad transportu wiec bez retry
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def get_product(self, product_id: int) -> Product | None:
        try:
            data = self.fetch_product(product_id)
        except RequestException as e:
            logger.error(f"Catalog lookup for product {product_id} failed: {e}")
            raise StoreUnavailable("Catalog service unavailable") from e

        if data is None:
            return None

        return Product(
            id=int(data["id"]),
            name=data["name"],
            price=int(data["price"]),
            category=data.get("category", ""),
            discount_percentage=data.get("discount_percentage"),
            in_stock=bool(data.get("in_stock", True)),
        )
