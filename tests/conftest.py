import sys
from pathlib import Path
import pytest
from typing import List
from datetime import datetime, timezone

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
sys.path.insert(0, project_root)

# Now we can import from ideaboard
from ideaboard.services.types import Idea
from ideaboard.services.text import build_vocabulary, vectorize

def make_ideas(*texts: str) -> List[Idea]:
    """Ideas with ids i1, i2, ... in the given order"""
    created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [Idea(id=f"i{n}", text=text, author="Tester", created_at=created_at) for n, text in enumerate(texts, 1)]

def vectors_for(ideas: List[Idea], extra_texts: List[str] = ()) -> dict:
    vocabulary = build_vocabulary(list(extra_texts) + [idea.text for idea in ideas])
    return {idea.id: vectorize(idea.text, vocabulary) for idea in ideas}

@pytest.fixture
def churn_ideas() -> List[Idea]:
    """Two near duplicates and one unrelated idea"""
    return make_ideas(
        "daily streak rewards",
        "daily streak bonus program",
        "redesign the onboarding flow completely",
    )

@pytest.fixture
def realistic_ideas() -> List[Idea]:
    """Fixture with realistic retention ideas"""
    return make_ideas(
        "Send a weekly email digest with personalized tips",
        "Personalized email reminders for inactive users",
        "Add a referral program with rewards for both sides",
        "Gamify the app with daily streaks and badges",
        "Offer a discount when users try to cancel their subscription",
        "Daily streaks with badges for consistent use",
        "Interview churned customers to learn why they left",
        "Referral rewards for inviting friends",
    )

@pytest.fixture(autouse=True)
def disable_limiter():
    """Disable rate limiting during tests"""
    from ideaboard.core.limiter import limiter
    limiter.enabled = False
    yield
    limiter.enabled = True
