"""
Event and group directory schemas
"""

from typing import List, Optional
from pydantic import BaseModel, Field

class EventInfo(BaseModel):
    """An event of the wedding (ceremony, dinner, brunch...)"""
    name: str
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None

class Group(BaseModel):
    """Guest group and the events it is invited to"""
    id: str
    name: str = "Unnamed Group"
    events: List[str] = Field(default_factory=list)
    description: Optional[str] = None
