"""Models for the Finnhub provider (API params and response rows)."""
from pydantic import BaseModel, ConfigDict, Field


class FinnhubQuote(BaseModel):
    """/quote response. Finnhub answers unknown symbols with all zeros."""

    model_config = ConfigDict(populate_by_name=True)

    current: float | None = Field(default=None, alias="c")
    change: float | None = Field(default=None, alias="d")
    change_percent: float | None = Field(default=None, alias="dp")
    previous_close: float | None = Field(default=None, alias="pc")


class FinnhubMetricParams(BaseModel):
    """Params for /stock/metric. Merge with 'symbol' at call site."""

    metric: str = "all"


class FinnhubMetrics(BaseModel):
    """Subset of /stock/metric 'metric' block we use."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    market_capitalization: float | None = Field(default=None, alias="marketCapitalization")  # millions USD
    pe_ttm: float | None = Field(default=None, alias="peTTM")
    pe_basic_excl_extra_ttm: float | None = Field(default=None, alias="peBasicExclExtraTTM")

    @property
    def pe_ratio(self) -> float | None:
        return self.pe_ttm if self.pe_ttm is not None else self.pe_basic_excl_extra_ttm
