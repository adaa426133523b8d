from pydantic import BaseModel, Field
from typing import Optional, Dict, List


class VoteRequest(BaseModel):
    vote_type: Optional[str] = None


class VoteResult(BaseModel):
    likes: int
    dislikes: int
    userVote: Optional[str] = None


class VoteCounts(BaseModel):
    likes: int = 0
    dislikes: int = 0


class BatchVoteRequest(BaseModel):
    itemIds: List[str] = Field(default_factory=list)
    table: str = "suggestion_votes"


class BatchVoteResponse(BaseModel):
    voteCounts: Dict[str, VoteCounts]
    userVotes: Dict[str, str]
