from typing import Any, Optional

from pydantic import BaseModel, Field


class ExpertRecord(BaseModel):
    """One expert row derived from a single search result item.

    `rank` is the 1-indexed position of the item in the result list as
    returned by the search API. `raw_json` holds a deep copy of that item.
    """

    name: str = ""
    project_id: Optional[str] = None
    linkedin_url: str = ""
    headline: str = ""
    summary: str = ""
    reasoning: str = ""
    for_query: str
    rank: int = Field(ge=1)
    raw_json: Any = Field(default_factory=dict)
