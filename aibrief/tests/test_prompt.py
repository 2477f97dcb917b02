"""
Tests for prompt construction.
"""

from datetime import datetime, timezone

from aibrief.models import NewsItem, Tone
from aibrief.prompt import (
    MAX_PROMPT_ITEMS,
    build_prompt,
    format_window,
    temperature_for_model,
    tone_description,
)


def news(n: int) -> list[NewsItem]:
    return [
        NewsItem(
            id=str(i),
            title=f"Story {i}",
            source_name=f"Source {i}",
            url=f"https://example.com/{i}",
            published_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        for i in range(n)
    ]


class TestBuildPrompt:
    """Tests for build_prompt()."""

    def test_renders_item_lines(self):
        prompt = build_prompt(news(2), Tone.PRACTICAL, "", [], 24)
        assert "- Story 0 | Source 0 | https://example.com/0" in prompt
        assert "- Story 1 | Source 1 | https://example.com/1" in prompt

    def test_caps_items(self):
        prompt = build_prompt(news(MAX_PROMPT_ITEMS + 5), Tone.PRACTICAL, "", [], 24)
        assert f"- Story {MAX_PROMPT_ITEMS - 1} |" in prompt
        assert f"- Story {MAX_PROMPT_ITEMS} |" not in prompt

    def test_contains_required_headings(self):
        prompt = build_prompt(news(1), Tone.PRACTICAL, "", [], 24)
        for heading in (
            "Headline:",
            "Summary:",
            "Other Stories:",
            "Deep Dives:",
            "Prompt Studio:",
            "Tomorrow's Radar:",
        ):
            assert heading in prompt

    def test_absent_topics_and_preferred(self):
        prompt = build_prompt(news(1), Tone.PRACTICAL, "   ", [], 24)
        assert "Focus topics: None provided." in prompt
        assert "Preferred sources: None" in prompt

    def test_topics_and_preferred(self):
        prompt = build_prompt(news(1), Tone.PRACTICAL, "agents, evals", ["A", "B"], 24)
        assert "Focus topics: agents, evals" in prompt
        assert "Preferred sources: A, B" in prompt

    def test_empty_items(self):
        prompt = build_prompt([], Tone.PRACTICAL, "", [], 24)
        assert prompt.endswith("- No items available")

    def test_window_in_prompt(self):
        prompt = build_prompt(news(1), Tone.PRACTICAL, "", [], 48)
        assert "Focus on the last 48 hours" in prompt

    def test_deterministic(self):
        args = (news(3), Tone.BUILDER, "agents", ["Source 1"], 24)
        assert build_prompt(*args) == build_prompt(*args)


class TestToneAndModel:
    """Tests for tone descriptors and model parameters."""

    def test_tone_descriptors(self):
        assert "executive" in tone_description(Tone.EXECUTIVE)
        assert "builder" in tone_description("builder")

    def test_unknown_tone_defaults_to_practical(self):
        assert tone_description("whimsical") == tone_description(Tone.PRACTICAL)
        assert tone_description(None) == tone_description(Tone.PRACTICAL)

    def test_temperature_omitted_for_gpt5(self):
        assert temperature_for_model("gpt-5") is None
        assert temperature_for_model(" GPT-5-mini ") is None

    def test_temperature_for_other_models(self):
        assert temperature_for_model("gpt-4o-mini") == 0.4

    def test_format_window(self):
        assert format_window(24) == "24 hours"
        assert format_window(None) == "24 hours"
        assert format_window(7.5) == "7.5 hours"
