# app/services/product_client.py
from decimal import Decimal

import requests

from app.domain.errors import NotFoundError
from app.domain.schemas import ProductData
from app.utils.retry import http_retry
from app.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = PRODUCT_SERVICE_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @http_retry()
    def find_one(self, product_id: str) -> ProductData:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = self.http.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            #NotFoundError nie jest RequestException wiec tenacity nie ponawia
            raise NotFoundError(f"Product with ID {product_id} not found")
        resp.raise_for_status()

        return self._to_product(product_id, resp.json())

    @staticmethod
    def _to_product(product_id: str, data: dict) -> ProductData:
        #product-service zwraca camelCase
        sale = data.get("salePercentage")
        return ProductData(
            product_id=str(data.get("id", product_id)),
            product_name=data.get("productName") or data.get("name", ""),
            selling_price=Decimal(str(data["sellingPrice"])),
            sale_percentage=Decimal(str(sale)) if sale is not None else None,
        )
