from __future__ import annotations

from typing import Sequence

from ..models import ScoredTopic
from ..utils.pipeline_config import MAX_WORD_COUNT, MIN_WORD_COUNT

MAX_RESEARCH_CHARS = 6000


def build_system_prompt(*, min_words: int = MIN_WORD_COUNT, max_words: int = MAX_WORD_COUNT) -> str:
    return (
        "You are an expert e-commerce content writer and SEO specialist. Write comprehensive, "
        "high-ranking articles for online sellers and e-commerce business owners.\n\n"
        "=== REQUIREMENTS ===\n"
        f"1. WORD COUNT: Write {min_words}-{max_words} words.\n"
        "2. DEPTH: Cover the topic from several angles with detailed explanations.\n"
        "3. SEO: Use relevant keywords naturally.\n"
        "4. EXAMPLES: Include at least 2-3 real-world examples or case studies.\n"
        "5. ACTIONABLE: Every section gives practical advice.\n\n"
        "=== STRUCTURE ===\n"
        "## Introduction, 3-5 main sections with ### subheadings, an optional comparison table "
        "in markdown, a case study, Key Takeaways (5-7 bullets) and a call to action.\n\n"
        "=== FORMATTING ===\n"
        "Use callout boxes such as <div class=\"pro-tip\"><strong>Pro Tip</strong> ...</div>, "
        "<div class=\"warning\">, <div class=\"info\"> and a closing <div class=\"key-takeaways\">. "
        "Do not put emojis in HTML.\n\n"
        "=== NEVER INCLUDE ===\n"
        "Word counts such as \"(150 words)\", section labels such as \"[Section 1]\", placeholders, "
        "or meta-talk such as \"Here is your article\".\n\n"
        "=== OUTPUT FORMAT (JSON) ===\n"
        "{\n"
        '  "title": "SEO-optimized title with main keyword (max 70 chars)",\n'
        '  "summary": "Compelling 2-3 sentence summary (max 200 chars)",\n'
        '  "content": "Full article content in markdown with all formatting elements",\n'
        '  "tags": ["main-keyword", "related-1", "related-2", "related-3", "related-4"],\n'
        '  "metaTitle": "SEO title with keyword (max 60 chars)",\n'
        '  "metaDescription": "Meta description with keyword and CTA (max 155 chars)"\n'
        "}\n\n"
        "RESPOND ONLY WITH VALID JSON. No additional text."
    )


def build_uniqueness_instruction(existing_titles: Sequence[str], *, limit: int = 10) -> str:
    """Ask the model to stay clear of up to ``limit`` already-published titles."""
    titles = [t for t in existing_titles if t][:limit]
    if not titles:
        return ""
    listed = "\n".join(f'- "{t}"' for t in titles)
    return (
        "\n\nIMPORTANT - UNIQUENESS REQUIREMENT:\n"
        "Your article must be UNIQUE and DIFFERENT from these existing articles:\n"
        f"{listed}\n\n"
        "Create a fresh perspective, different angle, or new approach to the topic."
    )


def build_user_prompt(
    topic: ScoredTopic, *, min_words: int = MIN_WORD_COUNT, max_words: int = MAX_WORD_COUNT
) -> str:
    research = (topic.text or "")[:MAX_RESEARCH_CHARS]
    return (
        "Based on this research, write an original article about e-commerce:\n\n"
        f"RESEARCH TOPIC: {topic.title}\n\n"
        f"SOURCE URL: {topic.url}\n\n"
        f"RESEARCH CONTENT:\n{research}\n\n"
        "=== INSTRUCTIONS ===\n"
        f"1. Write {min_words}-{max_words} words.\n"
        "2. Use the research content above as your primary source.\n"
        "3. Extract key facts, statistics and insights; paraphrase, do not copy.\n"
        "4. Expand with practical advice for e-commerce sellers.\n"
        "5. Include specific examples and actionable tips in every section.\n"
        "6. Use the formatting elements from the system prompt."
    )
