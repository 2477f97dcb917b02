"""
Tests for parsing generated text into brief sections.
"""

from aibrief.brief_parser import (
    parse_brief,
    parse_prompt_pack,
    parse_signals,
    parse_source_and_url,
    split_sections,
)


class TestParseBrief:
    """Tests for parse_brief() on well-formed output."""

    def test_headline_and_summary(self, sample_brief):
        sections = parse_brief(sample_brief)
        assert sections.headline == "OpenAI ships a new reasoning model."
        assert sections.summary == "Labs released models and tools this week."

    def test_other_stories_groups(self, sample_brief):
        sections = parse_brief(sample_brief)
        assert len(sections.other_stories) == 1
        group = sections.other_stories[0]
        assert group.theme == "Models"
        assert [i.story for i in group.items] == [
            "Google updated Gemini.",
            "Anthropic shipped a new Claude.",
        ]
        assert group.items[0].source == "Google AI Blog"
        assert group.items[0].url == "https://blog.google/gemini"
        assert group.items[1].source == "Anthropic News"
        assert group.items[1].url == "https://anthropic.com/news/claude"

    def test_deep_dives(self, sample_brief):
        sections = parse_brief(sample_brief)
        assert len(sections.deep_dives) == 1
        dive = sections.deep_dives[0]
        assert dive.story == "A long look at inference costs."
        assert dive.source == "The Decoder"
        assert dive.url == "https://the-decoder.com/costs"

    def test_prompt_studio(self, sample_brief):
        sections = parse_brief(sample_brief)
        assert len(sections.prompt_studio) == 1
        idea = sections.prompt_studio[0]
        assert idea.task == "Meeting notes"
        assert idea.prompt == "Summarize these notes into decisions and owners."
        assert idea.best_for == "Team leads"
        assert idea.input_format == "Raw notes"
        assert idea.output_format == "Bullet list"

    def test_watchlist(self, sample_brief):
        sections = parse_brief(sample_brief)
        assert sections.watchlist == [
            "OpenAI is expected to price the new model for enterprise customers."
        ]

    def test_markdown_headings(self):
        text = "## **Headline:**\nBig news.\n\n### Summary\nShort summary.\n\n**Tomorrow’s Radar:**\n1. Watch item."
        sections = parse_brief(text)
        assert sections.headline == "Big news."
        assert sections.summary == "Short summary."
        assert sections.watchlist == ["Watch item."]


class TestParseBriefFallbacks:
    """parse_brief never fails and keeps unlabeled output."""

    def test_empty_input(self):
        sections = parse_brief("")
        assert sections.headline == ""
        assert sections.other_stories == []
        assert sections.watchlist == []

    def test_unlabeled_text_becomes_headline(self):
        text = "The model ignored the format entirely."
        assert parse_brief(text).headline == text

    def test_missing_sections_are_empty(self):
        sections = parse_brief("Headline:\nOnly a headline.")
        assert sections.headline == "Only a headline."
        assert sections.summary == ""
        assert sections.deep_dives == []
        assert sections.prompt_studio == []


class TestSectionHelpers:
    """Tests for the line-level helpers."""

    def test_split_sections_skips_blank_lines(self):
        sections = split_sections("Headline:\n\nA\n\nSummary:\nB\nC")
        assert sections == {"headline": ["A"], "summary": ["B", "C"]}

    def test_source_and_url_on_one_line(self):
        assert parse_source_and_url("Source: Verge | URL: https://v.com/x") == ("Verge", "https://v.com/x")

    def test_source_without_url(self):
        assert parse_source_and_url("Source: The Verge") == ("The Verge", "")

    def test_theme_without_items_is_kept(self):
        groups = parse_signals(["- Theme: Policy", "- Theme: Chips", "- Story: Nvidia ships.", "Source: NV"])
        assert [g.theme for g in groups] == ["Policy", "Chips"]
        assert groups[0].items == []
        assert groups[1].items[0].source == "NV"

    def test_items_without_theme_are_kept(self):
        groups = parse_signals(["- Story: Loose story.", "Source: X"])
        assert len(groups) == 1
        assert groups[0].theme == ""
        assert groups[0].items[0].story == "Loose story."

    def test_numbered_prompt_without_label(self):
        ideas = parse_prompt_pack(["1) Draft an email", "Prompt: Write it politely.", "2. Task: Plan a trip"])
        assert [i.task for i in ideas] == ["Draft an email", "Plan a trip"]
        assert ideas[0].prompt == "Write it politely."

    def test_unlabeled_prompt_lines_extend_prompt(self):
        ideas = parse_prompt_pack(["Task: Review code", "Prompt: Check for bugs", "and suggest fixes."])
        assert ideas[0].prompt == "Check for bugs and suggest fixes."

    def test_version_numbers_are_not_list_markers(self):
        ideas = parse_prompt_pack(["Task: Compare", "3.5 Sonnet versus newer models"])
        assert len(ideas) == 1
        assert ideas[0].prompt == "3.5 Sonnet versus newer models"
