from typing import List

from pydantic import BaseModel, Field

class TeamRef(BaseModel):
    """Snapshot of a team (id and display name) copied into a matchup."""
    id: str
    name: str

    class Config:
        frozen = True

class TeamModel(BaseModel):
    id: str
    name: str
    members: List[str] = Field(default_factory=list) # Member user ids, in roster order

    class Config:
        from_attributes = True
        frozen = True

    def ref(self) -> TeamRef:
        return TeamRef(id=self.id, name=self.name)
