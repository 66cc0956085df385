from typing import List, Optional
from pydantic import BaseModel, Field


class ShopResponse(BaseModel):
    """Schema for a directory listing."""
    id: int = Field(..., description="Shop ID")
    name: str = Field(..., description="Shop name")
    country: str = Field(..., description="Country")
    city: str = Field(..., description="City")
    address: Optional[str] = Field(None, description="Street address")
    phone: Optional[str] = Field(None, description="Phone number")
    website: Optional[str] = Field(None, description="Website URL")
    hours: Optional[str] = Field(None, description="Opening hours")
    rating: Optional[float] = Field(None, description="Average rating (0-5)")
    reviews_count: Optional[int] = Field(None, description="Number of reviews")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")
    place_id: Optional[str] = Field(None, description="Maps place identifier")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "id": 1,
                "name": "Motorrad Schmidt",
                "country": "Germany",
                "city": "Berlin",
                "address": "Hauptstrasse 12, 10115 Berlin",
                "phone": "+49 30 1234567",
                "website": "https://motorrad-schmidt.example",
                "hours": "Mon-Fri 08:00-18:00",
                "rating": 4.6,
                "reviews_count": 213,
                "latitude": 52.52,
                "longitude": 13.405,
                "place_id": "ChIJ-example",
            }
        },
    }


class ShopFilters(BaseModel):
    """Directory filters as typed into the search bar and dropdowns."""
    search: str = Field("", description="Free text matched against name, city and address")
    country: str = Field("", description="Exact country")
    city: str = Field("", description="Exact city")
    rating: str = Field("", description="Minimum rating, e.g. '4' or '4.5'")


class ShopFilterUpdate(BaseModel):
    """Partial filter change; only the fields sent are applied."""
    search: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    rating: Optional[str] = None


class ShopStats(BaseModel):
    total_shops: int = Field(0, description="All listed shops, fetched once on mount")
    total_countries: int = Field(0, description="Distinct countries, fetched once on mount")
    visible_shops: int = Field(0, description="Shops currently displayed")


class DirectoryView(BaseModel):
    """Everything the directory screen renders."""
    shops: List[ShopResponse]
    filters: ShopFilters
    stats: ShopStats
    countries: List[str]
    cities: List[str]
    page: int
    has_more: bool
    loading: bool
    error: Optional[str] = None
