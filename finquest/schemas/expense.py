from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime

from finquest.core.helpers.geo_helpers import GeoHelper


class ExpenseCreate(BaseModel):
    amount: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    expense_date: Optional[datetime] = None
    location_name: Optional[str] = None
    location_lat: Optional[float] = Field(None, ge=-90, le=90)
    location_lng: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_coordinates(self):
        partial = self.location_lat is not None or self.location_lng is not None
        if partial and not GeoHelper.is_geocoded(self.location_lat, self.location_lng):
            raise ValueError("location_lat and location_lng must be given together")
        return self


class ExpenseResponse(BaseModel):
    id: str
    user_id: str
    amount: float
    category: str
    description: Optional[str] = None
    expense_date: datetime
    location_name: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None

    class Config:
        from_attributes = True
