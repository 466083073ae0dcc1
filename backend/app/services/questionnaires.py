"""
Fixed questionnaire banks and answer scales.

Two survey variants share the same 12-question, 5-point format:
- c_level: strategy, investment, and organizational readiness
- shopfloor: operator skills, automation, and plant-floor data

Question order matters: it's the order the form presents them and the
order the PDF report lists them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Question:
    id: int
    question: str
    category: str


@dataclass(frozen=True)
class LikertOption:
    value: int
    label: str
    description: str


ASSESSMENT_TYPES = ("c_level", "shopfloor")

ASSESSMENT_DISPLAY_NAMES = {
    "c_level": "C-Level Management",
    "shopfloor": "Shopfloor Operators",
}

C_LEVEL_QUESTIONS: tuple[Question, ...] = (
    Question(1, "Our company has a clear digital transformation roadmap.",
             "Measures strategic planning."),
    Question(2, "We see digitalization as a long-term competitive advantage.",
             "Gauges strategic importance."),
    Question(3, "Our investment decisions consider ROI and long-term impact equally.",
             "Balances cost vs value."),
    Question(4, "We have successfully piloted new digital solutions before scaling.",
             "Practical proof of readiness."),
    Question(5, "We have budget allocated specifically for digitalization initiatives.",
             "Tests financial readiness."),
    Question(6, "We have KPIs in place to measure the impact of digital investments.",
             "Shows performance orientation."),
    Question(7, "We leverage advanced engineering tools (e.g., CAD/CAE, PLM) to "
                "accelerate product development and reduce time-to-market.",
             "Assesses digital engineering maturity"),
    Question(8, "Our cross-functional teams (R&D, manufacturing, operations) "
                "collaborate digitally during the early design phase to ensure "
                "manufacturability and cost efficiency.",
             "Checks integrated engineering and concurrent design maturity"),
    Question(9, "We have vertical integration between our IT and Operational "
                "Technology (OT) systems, enabling seamless data flow across "
                "ISA-95 levels (from enterprise Level 4 to plant operations "
                "Level 3 and control systems Level 2) to support real-time "
                "decision-making and end-to-end digitalization.",
             "Assess technology integration"),
    Question(10, "We have a dedicated team or champion for digital transformation.",
             "Checks organizational structure"),
    Question(11, "We are willing to change legacy processes that hold us back.",
             "Measures change readiness"),
    Question(12, "We are prepared to invest in culture change and training programs.",
             "Looks at human factors"),
)

SHOPFLOOR_QUESTIONS: tuple[Question, ...] = (
    Question(1, "How familiar are your operators with digital tools and technologies?",
             "Digital Literacy"),
    Question(2, "What is the current state of your production line automation?",
             "Automation"),
    Question(3, "How well do your operators understand Industry 4.0 concepts?",
             "Knowledge"),
    Question(4, "What is your current level of real-time data visibility on the shop floor?",
             "Data Visibility"),
    Question(5, "How mature is your predictive maintenance program?",
             "Maintenance"),
    Question(6, "What is your current level of digital work instructions and training?",
             "Training"),
    Question(7, "How well integrated are your quality control systems?",
             "Quality"),
    Question(8, "What is your current level of mobile device usage on the shop floor?",
             "Mobile Technology"),
    Question(9, "How mature is your energy management and sustainability tracking?",
             "Sustainability"),
    Question(10, "What is your current level of cross-functional collaboration on "
                 "digital initiatives?",
             "Collaboration"),
    Question(11, "How well do you track and measure operator performance digitally?",
             "Performance Tracking"),
    Question(12, "What is your shop floor's overall readiness for Industry 4.0 "
                 "implementation?",
             "Overall Readiness"),
)

QUESTION_BANKS: dict[str, tuple[Question, ...]] = {
    "c_level": C_LEVEL_QUESTIONS,
    "shopfloor": SHOPFLOOR_QUESTIONS,
}

# Scale shown on the assessment form
LIKERT_SCALE: tuple[LikertOption, ...] = (
    LikertOption(1, "Not at all", "No implementation or awareness"),
    LikertOption(2, "Minimal", "Basic awareness, no implementation"),
    LikertOption(3, "Somewhat", "Partial implementation or planning"),
    LikertOption(4, "Well", "Good implementation and understanding"),
    LikertOption(5, "Excellent", "Full implementation and mastery"),
)

# Wording used for the response line in the PDF report
RESPONSE_LABELS = {
    1: "Strongly Disagree",
    2: "Disagree",
    3: "Neutral",
    4: "Agree",
    5: "Strongly Agree",
}
NOT_ANSWERED = "Not Answered"


def get_questions(assessment_type: str) -> tuple[Question, ...]:
    """Return the question bank for a survey variant.

    Raises:
        KeyError: If the assessment type is unknown.
    """
    return QUESTION_BANKS[assessment_type]


def display_name(assessment_type: str) -> str:
    return ASSESSMENT_DISPLAY_NAMES.get(assessment_type, assessment_type)


def response_label(value: int) -> str:
    """Report label for an answer value; anything outside 1-5 is unanswered."""
    return RESPONSE_LABELS.get(value, NOT_ANSWERED)
