"""Domain models for the weekly creator digest"""
from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class DigestStats:
    """Creator activity numbers shown at the top of the digest"""
    new_lobbies: int
    new_comments: int
    total_campaigns: int
    total_lobbies: int

@dataclass
class TopCampaignHighlight:
    title: str
    slug: str
    lobby_count: int
    comment_count: int
    signal_score: Optional[float]

@dataclass
class Creator:
    id: str
    email: str
    display_name: str

@dataclass
class CreatorDigestResult:
    """Outcome of one creator's digest; ``reason`` is set when not sent"""
    creator_id: str
    creator_email: str
    creator_name: str
    digest_sent: bool
    reason: Optional[str] = None

@dataclass
class SendDigestResults:
    """Batch outcome of a weekly digest run"""
    total: int = 0
    sent: int = 0
    failed: int = 0
    results: List[CreatorDigestResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
