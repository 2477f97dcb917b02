"""
Prompt construction for brief generation.

The headings and labels in BRIEF_FORMAT are the contract with
brief_parser: the model is told to reproduce them verbatim and the parser
segments its output on them. Keep both sides in sync.
"""

from .models import NewsItem, Tone

# System prompt establishing the editor persona
SYSTEM_PROMPT = "You are an expert AI news editor."

MAX_PROMPT_ITEMS = 20

TONE_DESCRIPTIONS = {
    Tone.EXECUTIVE: "executive, concise, outcomes-focused",
    Tone.PRACTICAL: "practical, clear, with actionable takeaways",
    Tone.BUILDER: "builder-focused, with experiments and prompts",
}

BRIEF_FORMAT = """Output format (use these exact headings and labels):
Headline:
<1 sentence>

Summary:
<3-5 sentences, readable paragraph>

Other Stories:
- Theme: <theme name>
  - Story: <1 sentence>
    Source: <source name>
    URL: <full link>
(Provide 3-4 themes.)

Deep Dives:
- Story: <1-2 sentences>
  Source: <source name>
  URL: <full link>
(Provide 2-3 items.)

Prompt Studio:
1) Task: <short task name>
   Prompt: <1-2 sentences, general daily utility prompt>
   Best For: <who/what it's best for>
   Input Format: <what the user should paste>
   Output Format: <what the model should return>
(Provide 2-3 prompts.)

Tomorrow's Radar:
- <2-3 full-sentence, concrete watch items tied to the provided sources>
(Do NOT include Source/URL lines here. Each bullet should be a single sentence. Avoid generic language. Each item must reference a specific company, product, model, or policy mentioned in the sources and be distinct from Other Stories and Deep Dives.)"""

CONSTRAINTS = """Critical constraints:
- Do not ask the user for more sources or items.
- Do not include placeholders, caveats, or meta-commentary about missing data.
- If sources are limited, generalize carefully while staying grounded in the provided items.
- Avoid duplicate sentences across sections; each item should be unique.
- Ensure that each distinct source listed above is referenced at least once in Other Stories or Deep Dives so the brief reflects the full set of provided news.
- When you mention a source, use the exact source name from the list and base the sentence on the associated title and URL so it is grounded."""


def tone_description(tone: Tone | str | None) -> str:
    """Map a tone (or its name) to a short style descriptor, defaulting to practical."""
    if isinstance(tone, str):
        try:
            tone = Tone(tone.strip().lower())
        except ValueError:
            tone = None
    return TONE_DESCRIPTIONS.get(tone, TONE_DESCRIPTIONS[Tone.PRACTICAL])


def temperature_for_model(model: str) -> float | None:
    """gpt-5 family models reject a temperature; everything else gets 0.4."""
    if model.strip().lower().startswith("gpt-5"):
        return None
    return 0.4


def format_window(window_hours: float | None) -> str:
    if not window_hours:
        return "24 hours"
    if float(window_hours).is_integer():
        return f"{int(window_hours)} hours"
    return f"{window_hours} hours"


def build_prompt(
    items: list[NewsItem],
    tone: Tone | str | None,
    focus_topics: str,
    preferred_sources: list[str],
    window_hours: float | None,
) -> str:
    """
    Build the instruction document sent to the generation model.

    Pure and deterministic: identical inputs always yield the identical
    string. Only the first MAX_PROMPT_ITEMS items are listed.
    """
    news_lines = "\n".join(
        f"- {item.title} | {item.source_name} | {item.url}"
        for item in items[:MAX_PROMPT_ITEMS]
    )
    topics = (focus_topics or "").strip()
    topics_line = topics if topics else "None provided."
    preferred_line = ", ".join(preferred_sources) if preferred_sources else "None"

    return f"""Create "The AI Brief" news brief. Tone: {tone_description(tone)}.
Focus on the last {format_window(window_hours)} and avoid hype. Use the items below.
Focus topics: {topics_line}
Preferred sources: {preferred_line}

{BRIEF_FORMAT}

{CONSTRAINTS}

{news_lines if news_lines else "- No items available"}"""
