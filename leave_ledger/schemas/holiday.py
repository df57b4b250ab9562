"""
Holiday calendar schemas
"""
from datetime import date as date_type
from typing import List

from pydantic import BaseModel


class HolidayOut(BaseModel):
    date: date_type
    name: str


class HolidayListOut(BaseModel):
    year: int
    holidays: List[HolidayOut]
    total: int


class WorkingDaysOut(BaseModel):
    start_date: date_type
    end_date: date_type
    working_days: int
    calendar_days: int
