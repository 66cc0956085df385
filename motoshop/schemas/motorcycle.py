from datetime import date, datetime
from typing import Any, Dict, List, Literal, Mapping, Optional
from pydantic import BaseModel, Field

from motoshop.services.validation import is_blank, parse_date, parse_int

MOTORCYCLE_BRANDS: List[str] = [
    "Aprilia",
    "BMW",
    "Benelli",
    "Ducati",
    "Harley-Davidson",
    "Honda",
    "Husqvarna",
    "Indian",
    "Kawasaki",
    "KTM",
    "Moto Guzzi",
    "MV Agusta",
    "Royal Enfield",
    "Suzuki",
    "Triumph",
    "Yamaha",
    "Other",
]

MOTORCYCLE_FORM_DEFAULTS: Dict[str, Any] = {
    "brand": "",
    "model": "",
    "year": "",
    "mileage": "",
    "mileage_unit": "km",
    "engine_size": "",
    "color": "",
    "license_plate": "",
    "vin": "",
    "purchase_date": "",
    "current_owner": True,
    "condition": "",
    "notes": "",
}


class MotorcycleForm(BaseModel):
    """Raw add/edit form input, as typed by the rider."""
    brand: str = ""
    model: str = ""
    year: str = ""
    mileage: str = ""
    mileage_unit: Literal["km", "miles"] = "km"
    engine_size: str = ""
    color: str = ""
    license_plate: str = ""
    vin: str = ""
    purchase_date: str = ""
    current_owner: bool = True
    condition: Literal["excellent", "good", "fair", "poor", ""] = ""
    notes: str = ""


class MotorcycleRecord(BaseModel):
    """
    Typed row for biker_motorcycles. Optional columns are only set when
    the rider filled them in.
    """
    brand: str
    model: str
    year: int
    mileage_unit: Literal["km", "miles"] = "km"
    current_owner: bool = True
    mileage: Optional[int] = None
    engine_size: Optional[int] = None
    color: Optional[str] = None
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    purchase_date: Optional[date] = None
    condition: Optional[Literal["excellent", "good", "fair", "poor"]] = None
    notes: Optional[str] = None

    @classmethod
    def from_form(cls, values: Mapping[str, Any]) -> "MotorcycleRecord":
        fields: Dict[str, Any] = {
            "brand": values["brand"].strip(),
            "model": values["model"].strip(),
            "year": parse_int(values["year"]),
            "mileage_unit": values.get("mileage_unit") or "km",
            "current_owner": bool(values.get("current_owner", True)),
        }
        if not is_blank(values.get("mileage")):
            fields["mileage"] = parse_int(values["mileage"])
        if not is_blank(values.get("engine_size")):
            fields["engine_size"] = parse_int(values["engine_size"])
        for name in ("color", "license_plate", "vin", "notes"):
            if not is_blank(values.get(name)):
                fields[name] = values[name].strip()
        if not is_blank(values.get("purchase_date")):
            fields["purchase_date"] = parse_date(values["purchase_date"])
        if values.get("condition"):
            fields["condition"] = values["condition"]
        return cls(**fields)

    def insert_values(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    def update_values(self) -> Dict[str, Any]:
        """Every column, so optional fields the rider cleared become NULL."""
        return self.model_dump()


class MotorcycleResponse(BaseModel):
    """Schema for a motorcycle in the garage."""
    id: str = Field(..., description="Motorcycle ID")
    user_id: str = Field(..., description="Owner ID")
    brand: str
    model: str
    year: int
    mileage: Optional[int] = None
    mileage_unit: str = "km"
    engine_size: Optional[int] = Field(None, description="Engine size in cc")
    color: Optional[str] = None
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    purchase_date: Optional[date] = None
    current_owner: bool = True
    condition: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    def form_values(self) -> Dict[str, Any]:
        """The record as the add/edit form shows it."""
        return {
            "brand": self.brand,
            "model": self.model,
            "year": str(self.year),
            "mileage": "" if self.mileage is None else str(self.mileage),
            "mileage_unit": self.mileage_unit,
            "engine_size": "" if self.engine_size is None else str(self.engine_size),
            "color": self.color or "",
            "license_plate": self.license_plate or "",
            "vin": self.vin or "",
            "purchase_date": self.purchase_date.isoformat() if self.purchase_date else "",
            "current_owner": self.current_owner,
            "condition": self.condition or "",
            "notes": self.notes or "",
        }


class GarageView(BaseModel):
    """Everything the profile screen renders."""
    user_email: str = ""
    motorcycles: List[MotorcycleResponse]
    show_form: bool
    editing_id: Optional[str] = None
    form: Dict[str, Any]
    brands: List[str] = MOTORCYCLE_BRANDS
    loading: bool
    error: Optional[str] = None
