"""
Directory screen: filtered, paginated listing of motorcycle shops.
"""

from typing import Any, Dict, List, Optional
import logging

from motoshop.core.errors import GatewayError
from motoshop.gateway.tables import OrderBy, TableStore
from motoshop.models.shop import MotorcycleShop
from motoshop.schemas.shop import DirectoryView, ShopFilters, ShopResponse, ShopStats
from motoshop.services.validation import parse_number

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("name", "city", "address")
SHOP_ORDER = (OrderBy("country"), OrderBy("city"), OrderBy("name"))
COUNTRIES_PROCEDURE = "get_distinct_countries"


def unique(values: List[Any]) -> List[Any]:
    """De-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(v for v in values if v is not None))


class DirectoryController:
    def __init__(self, tables: TableStore, page_size: int = 50, country_sample_limit: int = 1000):
        self.tables = tables
        self.page_size = page_size
        self.country_sample_limit = country_sample_limit

        self.filters = ShopFilters()
        self.shops: List[Dict[str, Any]] = []
        self.page = 0
        self.has_more = False
        self.countries: List[str] = []
        self.cities: List[str] = []
        self.stats = ShopStats()
        self.loading = True
        self.error: Optional[str] = None

    def mount(self) -> None:
        self.load_stats()
        self.load_countries()
        self.load_cities(self.filters.country)
        self.load_shops()

    def load_stats(self) -> None:
        """Total shops and countries; fetched once, not kept in sync with filters."""
        try:
            total = self.tables.count(MotorcycleShop)
            countries = self.tables.distinct(MotorcycleShop, "country")
        except GatewayError as e:
            logger.error(f"Error loading stats: {e.message}")
            self.error = e.message
            return
        self.stats = ShopStats(
            total_shops=total,
            total_countries=len(countries),
            visible_shops=self.stats.visible_shops,
        )

    def load_countries(self) -> None:
        try:
            rows = self.tables.rpc(COUNTRIES_PROCEDURE)
            self.countries = unique([row.get("country") for row in rows])
            return
        except GatewayError as e:
            logger.error(f"Error loading countries: {e.message}")

        # Fallback: sample the table and de-duplicate
        try:
            rows = self.tables.select(
                MotorcycleShop,
                columns=["country"],
                order_by=[OrderBy("country")],
                limit=self.country_sample_limit,
            )
        except GatewayError as e:
            logger.error(f"Fallback error loading countries: {e.message}")
            return
        self.countries = unique([row["country"] for row in rows])

    def load_cities(self, country: str) -> None:
        if not country:
            self.cities = []
            return
        try:
            self.cities = self.tables.distinct(MotorcycleShop, "city", eq={"country": country})
        except GatewayError as e:
            logger.error(f"Error loading cities: {e.message}")

    def _query_args(self, filters: ShopFilters) -> Dict[str, Any]:
        eq: Dict[str, Any] = {}
        if filters.country:
            eq["country"] = filters.country
        if filters.city:
            eq["city"] = filters.city
        gte: Dict[str, Any] = {}
        min_rating = parse_number(filters.rating) if filters.rating else None
        if min_rating is not None:
            gte["rating"] = min_rating
        search = (filters.search, SEARCH_COLUMNS) if filters.search else None
        return {"eq": eq, "gte": gte, "search": search}

    def load_shops(self, append: bool = False) -> None:
        filters = self.filters.model_copy()
        page = self.page + 1 if append else 0
        args = self._query_args(filters)
        self.loading = True
        try:
            rows = self.tables.select(
                MotorcycleShop,
                order_by=SHOP_ORDER,
                offset=page * self.page_size,
                limit=self.page_size,
                **args,
            )
            matching = self.tables.count(MotorcycleShop, **args)
        except GatewayError as e:
            logger.error(f"Error loading shops: {e.message}")
            self.error = e.message
            return
        finally:
            self.loading = False

        self.shops = self.shops + rows if append else rows
        self.page = page
        self.has_more = len(self.shops) < matching
        self.stats = self.stats.model_copy(update={"visible_shops": len(self.shops)})
        self.error = None

    def load_more(self) -> None:
        if not self.has_more or self.loading:
            return
        self.load_shops(append=True)

    def set_filter(self, key: str, value: str) -> None:
        """Apply one filter change; a new country clears the city and reloads cities."""
        if key not in ShopFilters.model_fields:
            raise KeyError(f"Unknown filter '{key}'")
        update = {key: value or ""}
        if key == "country":
            update["city"] = ""
        self.filters = self.filters.model_copy(update=update)
        if key == "country":
            self.load_cities(self.filters.country)
        self.load_shops()

    def render(self) -> DirectoryView:
        return DirectoryView(
            shops=[ShopResponse.model_validate(row) for row in self.shops],
            filters=self.filters,
            stats=self.stats,
            countries=self.countries,
            cities=self.cities,
            page=self.page,
            has_more=self.has_more,
            loading=self.loading,
            error=self.error,
        )
