"""
OpenFoodFacts API client.

Handles HTTP requests to the OpenFoodFacts database. Implements
IFoodDatabaseClient: lookups never raise, every failure is logged and
reported as a miss. Requests are not retried.
"""

import asyncio
from typing import Any, Optional

import aiohttp
import structlog
from pydantic import ValidationError

from nutriscan.domain.nutrition.models import NutritionRecord, SourceTag
from nutriscan.domain.nutrition.openfoodfacts_mapper import (
    BARCODE_FALLBACK_MACROS,
    SEARCH_FALLBACK_MACROS,
    OpenFoodFactsMapper,
)
from nutriscan.domain.shared.errors import TransientSourceError
from nutriscan.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)


class OpenFoodFactsClient:
    """OpenFoodFacts API client.

    Example:
        >>> async with OpenFoodFactsClient(timeout_seconds=5) as client:
        ...     record = await client.lookup_by_barcode("5000112637922")
        ...     dish = await client.search_by_name("jollof rice")
    """

    DEFAULT_BASE_URL = "https://world.openfoodfacts.org"
    DEFAULT_USER_AGENT = "nutriscan/1.0"
    SEARCH_FIELDS = "product_name,nutriments"

    def __init__(
        self,
        timeout_seconds: float,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize API client.

        Args:
            timeout_seconds: Total timeout per request; bounds lookup latency
            base_url: OpenFoodFacts host
            user_agent: User-Agent header sent with every request

        Raises:
            ValueError: If timeout is not positive
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive: {timeout_seconds}")
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "OpenFoodFactsClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.user_agent})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def lookup_by_barcode(self, barcode: str) -> Optional[NutritionRecord]:
        """Get product nutrition by barcode.

        Args:
            barcode: Product barcode

        Returns:
            NutritionRecord (source "Open Food Facts (Barcode)") or None
        """
        try:
            code = Barcode.from_string(barcode)
        except ValidationError:
            logger.info("Invalid barcode format", barcode=barcode)
            return None

        url = f"{self.base_url}/api/v2/product/{code.value}.json"

        try:
            data = await self._get_json(url)
            if data is None:
                logger.info("Barcode not found in OFF", barcode=code.value)
                return None

            result = OpenFoodFactsMapper.parse_product_response(data)
            if not result.is_found() or result.product is None:
                logger.info("Product not found in OFF", barcode=code.value)
                return None

            record = OpenFoodFactsMapper.to_nutrition_record(
                result.product,
                name=result.product.product_name or code.value,
                source=SourceTag.OPEN_FOOD_FACTS_BARCODE,
                fallback=BARCODE_FALLBACK_MACROS,
            )
        except (TransientSourceError, ValidationError) as e:
            logger.warning("OFF barcode lookup failed", barcode=code.value, error=str(e))
            return None

        logger.info("Product found in OFF", barcode=code.value, name=record.name)
        return record

    async def search_by_name(
        self, query: str, brand: Optional[str] = None
    ) -> Optional[NutritionRecord]:
        """Search products by text query, keeping the top result.

        Args:
            query: Food or dish name
            brand: Optional brand, prefixed to the query

        Returns:
            NutritionRecord named after ``query`` (source "Open Food Facts")
            or None
        """
        if not query or not query.strip():
            return None

        search_terms = f"{brand} {query}" if brand else query
        params: dict[str, str | int] = {
            "search_terms": search_terms,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": 1,
            "fields": self.SEARCH_FIELDS,
        }

        try:
            data = await self._get_json(f"{self.base_url}/api/v2/search", params=params)
            if data is None:
                return None

            top = OpenFoodFactsMapper.parse_search_response(data).top()
            if top is None:
                logger.info("No OFF products for query", query=search_terms)
                return None

            record = OpenFoodFactsMapper.to_nutrition_record(
                top,
                name=query,
                source=SourceTag.OPEN_FOOD_FACTS,
                fallback=SEARCH_FALLBACK_MACROS,
            )
        except (TransientSourceError, ValidationError) as e:
            logger.warning("OFF search failed", query=search_terms, error=str(e))
            return None

        logger.info("OFF search hit", query=search_terms, product=record.product_name)
        return record

    async def _get_json(
        self, url: str, params: Optional[dict[str, str | int]] = None
    ) -> Optional[Any]:
        """GET a JSON document.

        Returns:
            Decoded body, or None on 404

        Raises:
            TransientSourceError: On timeout, connection error, non-2xx
                status or undecodable body
        """
        if not self._session:
            raise TransientSourceError("Client not initialized, use async with")

        try:
            async with self._session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status == 404:
                    return None

                if response.status >= 400:
                    raise TransientSourceError(f"OpenFoodFacts API error: {response.status}")

                return await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            raise TransientSourceError(
                f"OpenFoodFacts API timeout after {self.timeout_seconds}s"
            ) from e
        except aiohttp.ClientError as e:
            raise TransientSourceError(f"OpenFoodFacts API client error: {e}") from e
        except ValueError as e:
            raise TransientSourceError(f"OpenFoodFacts returned invalid JSON: {e}") from e
