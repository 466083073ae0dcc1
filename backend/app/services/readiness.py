"""
Readiness tiers — the one place the 4-tier mapping lives.

A completed assessment has 12 answers on a 1-5 scale, so the total score
falls in [12, 60]. The score is bucketed into four ordered tiers:

    Beginner    12-24
    Developing  25-36
    Advanced    37-48
    Leader      49-60

Both the scoring path (POST /assessments) and the PDF layout engine read
from this module: thresholds, tier colors, descriptions, and the fixed
action plan shown for each tier.
"""

from dataclasses import dataclass
from enum import Enum


class ReadinessLevel(str, Enum):
    BEGINNER = "Beginner"
    DEVELOPING = "Developing"
    ADVANCED = "Advanced"
    LEADER = "Leader"


@dataclass(frozen=True)
class TierInfo:
    """Score band plus display attributes for one readiness tier."""
    min_score: int
    max_score: int
    description: str
    color: str  # hex, used by the PDF title page and the frontend badge


@dataclass(frozen=True)
class ActionPlan:
    """Fixed next-steps content for a readiness tier."""
    title: str
    meaning: str
    next_steps: tuple[str, ...]


MIN_TOTAL_SCORE = 12
MAX_TOTAL_SCORE = 60

TIERS: dict[ReadinessLevel, TierInfo] = {
    ReadinessLevel.BEGINNER: TierInfo(
        12, 24, "Basic understanding, needs foundational work", "#ef4444",
    ),
    ReadinessLevel.DEVELOPING: TierInfo(
        25, 36, "Growing awareness, some initiatives in place", "#f59e0b",
    ),
    ReadinessLevel.ADVANCED: TierInfo(
        37, 48, "Strong foundation, actively implementing", "#3b82f6",
    ),
    ReadinessLevel.LEADER: TierInfo(
        49, 60, "Industry leader, driving innovation", "#10b981",
    ),
}

ACTION_PLANS: dict[ReadinessLevel, ActionPlan] = {
    ReadinessLevel.BEGINNER: ActionPlan(
        title="Your Readiness Level: Beginner",
        meaning=(
            "Your organization is at the early stage of digital readiness. "
            "Foundational elements like clear strategy, leadership awareness, "
            "budget, and data basics may be missing or not formalized."
        ),
        next_steps=(
            "Create a simple, phased digital roadmap (1–3 years).",
            "Appoint a digital champion or team.",
            "Allocate a small budget for pilot projects.",
            "Run leadership workshops on Industry 4.0 basics.",
            "Start a low-risk pilot (e.g., predictive maintenance).",
            "Assess your data quality and security.",
            "Communicate clearly with employees about why digitalization matters.",
        ),
    ),
    ReadinessLevel.DEVELOPING: ActionPlan(
        title="Your Readiness Level: Developing",
        meaning=(
            "You have some digital initiatives in place but they may be "
            "isolated or limited in scale. You're still developing your "
            "internal capabilities and your overall approach."
        ),
        next_steps=(
            "Expand successful pilots into larger rollouts.",
            "Formalize your digital transformation roadmap.",
            "Review and strengthen data governance policies.",
            "Invest in employee training for key digital skills.",
            "Align your supply chain partners with your digital vision.",
            "Start defining clear ROI metrics for all digital projects.",
        ),
    ),
    ReadinessLevel.ADVANCED: ActionPlan(
        title="Your Readiness Level: Advanced",
        meaning=(
            "You have multiple digital initiatives working together with good "
            "processes and governance. Your workforce is more digitally "
            "skilled, and you see clear ROI."
        ),
        next_steps=(
            "Scale up pilots into enterprise-wide programs.",
            "Continue benchmarking against industry best practices.",
            "Develop advanced analytics or AI capabilities where it makes sense.",
            "Optimize your ecosystem: ensure supply chain partners are "
            "connected and aligned.",
            "Identify new revenue streams enabled by digitalization "
            "(e.g., new services).",
        ),
    ),
    ReadinessLevel.LEADER: ActionPlan(
        title="Your Readiness Level: Leader",
        meaning=(
            "Your organization is an industry leader in digital transformation. "
            "Digitalization is embedded in your strategy, culture, and "
            "operations, and you continuously innovate."
        ),
        next_steps=(
            "Invest in continuous improvement: keep refining your digital roadmap.",
            "Explore cutting-edge tech like autonomous systems, advanced "
            "robotics, or digital twins.",
            "Share best practices internally and externally to strengthen your brand.",
            "Lead industry partnerships or working groups.",
            "Future-proof your workforce through advanced upskilling and "
            "talent retention programs.",
        ),
    ),
}


def calculate_total_score(answers: dict[int, int]) -> int:
    """Sum the Likert values. Unanswered questions are simply absent."""
    return sum(answers.values())


def calculate_readiness_level(score: int) -> ReadinessLevel:
    """Map a total score onto its tier.

    Checked from the top tier down, so anything below the Developing
    threshold (including out-of-range scores) lands on Beginner.
    """
    for level in (
        ReadinessLevel.LEADER,
        ReadinessLevel.ADVANCED,
        ReadinessLevel.DEVELOPING,
    ):
        if score >= TIERS[level].min_score:
            return level
    return ReadinessLevel.BEGINNER


def coerce_level(value: str) -> ReadinessLevel:
    """Parse a stored tier name, falling back to Beginner for unknown values."""
    try:
        return ReadinessLevel(value)
    except ValueError:
        return ReadinessLevel.BEGINNER


def get_action_plan(level: ReadinessLevel) -> ActionPlan:
    return ACTION_PLANS[level]


def get_tier(level: ReadinessLevel) -> TierInfo:
    return TIERS[level]
