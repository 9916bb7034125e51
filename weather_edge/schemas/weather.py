from __future__ import annotations

from pydantic import BaseModel, Field


class WeatherQuery(BaseModel):
    """Weather lookup derived from an inbound request."""

    city: str = Field(..., description="City passed verbatim to the weather API")
    defaulted: bool = Field(
        False,
        description="True when the request carried no 'city' and the default was used",
    )

    @classmethod
    def from_params(cls, city: str | None, default_city: str) -> "WeatherQuery":
        """Build a query from the raw ``city`` parameter (absent or empty uses the default)."""
        if city:
            return cls(city=city, defaulted=False)
        return cls(city=default_city, defaulted=True)
