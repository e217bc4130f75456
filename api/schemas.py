from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class FilterPolicyModel(BaseModel):
    empty_workouts: Literal["none", "all"] = "none"
    missing_age: Literal["pass", "exclude"] = "exclude"


class DashboardFiltersModel(BaseModel):
    # None selects every workout type; [] is resolved by policy.empty_workouts.
    selected_workouts: Optional[List[str]] = None
    gender: str = "All"
    min_age: Optional[float] = None
    max_age: Optional[float] = None
    # Which range handle the user moved last; decides how an inverted range collapses.
    age_anchor: Optional[Literal["min", "max"]] = None
    policy: FilterPolicyModel = Field(default_factory=FilterPolicyModel)


class MetaWorkoutsResponse(BaseModel):
    workouts: List[str]


class MetaGendersResponse(BaseModel):
    genders: List[str]


class MetaAgesResponse(BaseModel):
    min_age: Optional[float] = None
    max_age: Optional[float] = None
    has_age: bool = False
