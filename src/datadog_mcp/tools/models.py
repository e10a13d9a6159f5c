"""Parameter shapes shared by the Datadog tools."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class TimeFilter(WireModel):
    query: Optional[str] = Field(default=None, description="Search query, e.g. 'service:web-app status:error'")
    from_: Optional[str] = Field(default=None, alias="from", description="Start of the time range, e.g. 'now-15m'")
    to: Optional[str] = Field(default=None, description="End of the time range, e.g. 'now'")


class LogsFilter(TimeFilter):
    indexes: Optional[List[str]] = Field(default=None, description="Log indexes to search")


class Page(WireModel):
    limit: Optional[int] = Field(default=None, ge=1, description="Items per page")
    cursor: Optional[str] = Field(default=None, description="Cursor from a previous response")


class Compute(WireModel):
    aggregation: str = Field(description="Aggregation function: count, cardinality, avg, sum, min, max, pc75, pc90, pc95, pc99")
    metric: Optional[str] = Field(default=None, description="Measure to aggregate, e.g. '@duration'")
    type: Optional[str] = Field(default=None, description="Compute type: total or timeseries")


class LogsGroupBySort(WireModel):
    aggregation: str = Field(description="Aggregation used for sorting")
    order: str = Field(description="asc or desc")


class SpansGroupBySort(WireModel):
    aggregation: Optional[str] = Field(default=None, description="Aggregation used for sorting")
    order: Optional[str] = Field(default=None, description="asc or desc")
    metric: Optional[str] = Field(default=None, description="Measure used for sorting")
    type: Optional[str] = Field(default=None, description="alphabetical or measure")


class LogsGroupBy(WireModel):
    facet: str = Field(description="Facet to group by, e.g. 'service'")
    limit: Optional[int] = Field(default=None, ge=1, description="Max groups")
    sort: Optional[LogsGroupBySort] = None


class SpansGroupBy(WireModel):
    facet: str = Field(description="Facet to group by, e.g. 'resource_name'")
    limit: Optional[int] = Field(default=None, ge=1, description="Max groups")
    sort: Optional[SpansGroupBySort] = None


class AggregateOptions(WireModel):
    timezone: Optional[str] = Field(default=None, description="Timezone for timeseries buckets, e.g. 'UTC'")


# Top-level result limits keep a prefix of the response, so they must be positive
Limit = Annotated[int, Field(ge=1, description="Max items to return")]
