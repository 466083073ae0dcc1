"""
Prompt templates for the AI insight features.

Three prompts, each paired with a short system prompt:
1. Recommendations — 5-7 actions targeting the lowest-scoring answers
2. Industry trends — top 5 trends with a business implication each
3. Best-in-class example — what "great" looks like for one question

The recommendations and trends prompts ask for JSON so the responses can
be stored and rendered into the PDF report. The model doesn't always
comply, so parsing in insights.py is lenient.
"""

from app.services.questionnaires import Question, display_name


RECOMMENDATIONS_SYSTEM_PROMPT = (
    "You are an expert digital transformation consultant. Provide practical, "
    "actionable recommendations in JSON format."
)

TRENDS_SYSTEM_PROMPT = (
    "You are an industry analyst. Respond only with a JSON array of objects, "
    "each with a trend and its implication."
)

BEST_IN_CLASS_SYSTEM_PROMPT = (
    "You are an expert in digital transformation for C-level executives."
)


def find_lowest_scoring_areas(
    answers: dict[int, int],
    questions: tuple[Question, ...],
    count: int = 3,
) -> list[dict]:
    """Pick the `count` lowest-scored answers, with question context.

    Ties keep question order. Answers to unknown question IDs are still
    reported, with a placeholder question text.
    """
    by_id = {q.id: q for q in questions}
    ranked = sorted(sorted(answers.items()), key=lambda item: item[1])

    areas = []
    for question_id, score in ranked[:count]:
        question = by_id.get(question_id)
        areas.append({
            "question": question.question if question else f"Question {question_id}",
            "category": question.category if question else "Unknown",
            "score": score,
        })
    return areas


def build_recommendations_prompt(
    assessment_type: str,
    readiness_level: str,
    lowest_areas: list[dict],
) -> str:
    """Build the user prompt for tailored recommendations."""
    areas_text = "\n".join(
        f"{i}. {area['question']} (Category: {area['category']}) - Score: {area['score']}/5"
        for i, area in enumerate(lowest_areas, 1)
    )

    return f"""You are an expert digital transformation consultant specializing in \
Industry 4.0 and manufacturing optimization.

Based on the following assessment results, provide 5-7 customized, actionable \
recommendations to improve the organization's digital readiness:

ASSESSMENT CONTEXT:
- Assessment Type: {display_name(assessment_type)}
- Current Readiness Level: {readiness_level}

LOWEST SCORING AREAS (need immediate attention):
{areas_text}

Please provide:
1. 5-7 specific, actionable recommendations tailored to address these lowest scoring areas
2. Each recommendation should be practical and achievable
3. Focus on quick wins and foundational improvements
4. Consider the current readiness level when suggesting complexity
5. Include estimated timeline and priority level for each recommendation
6. Keep descriptions concise and action-oriented (2-3 sentences max)

Format your response as a JSON object with this structure:
{{
  "recommendations": [
    {{
      "title": "Short, actionable title (3-5 words)",
      "description": "Concise, action-oriented explanation (2-3 sentences max)",
      "priority": "High/Medium/Low",
      "timeline": "1-3 months/3-6 months/6+ months",
      "impact": "Brief expected impact (1 sentence)"
    }}
  ]
}}"""


def build_industry_trends_prompt(industry: str) -> str:
    return (
        f"List the latest top 5 trends in the {industry} industry. For each trend, "
        "provide a brief implication for businesses in this industry. Respond as a "
        "JSON array of objects with this format:\n"
        "[\n"
        '  { "trend": "Trend name", "implication": "Brief implication for businesses" }\n'
        "]"
    )


def build_best_in_class_prompt(question: str) -> str:
    return (
        "You are an expert in digital transformation for C-level executives. For the "
        "following assessment question, provide a concise (1-2 sentences), practical, "
        'and relevant example of what "best-in-class" looks like for a leading '
        "organization.\n\n"
        f"Question: {question}\n\n"
        "Best-in-class example:"
    )
