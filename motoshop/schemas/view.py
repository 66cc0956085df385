from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from motoshop.services.router import Screen


class NavigateRequest(BaseModel):
    screen: Screen = Field(..., description="Screen to show")
    motorcycle_id: Optional[str] = Field(None, description="Required for serviceDocuments")


class ViewState(BaseModel):
    """The current screen and whatever that screen renders."""
    screen: Screen
    selected_motorcycle_id: Optional[str] = None
    authenticated: bool
    state: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "example": {
                "screen": "home",
                "selected_motorcycle_id": None,
                "authenticated": True,
                "state": {"shops": [], "has_more": False},
            }
        }
    }


class FormEdit(BaseModel):
    """Keystroke-level edits to one form."""
    values: Dict[str, Any] = Field(..., description="Field name to new value")
