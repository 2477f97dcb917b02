"""
Default source catalog.

Core AI news sources offered to new users. Labs and media feeds start
enabled; community, research, policy and social entries are opt-in.
"""

from .models import Source, SourceKind

# (id, name, url, kind, category, summary, tags, enabled)
_CORE_SOURCES = [
    ("openai-blog", "OpenAI Blog", "https://openai.com/blog/rss", SourceKind.RSS, "Labs",
     "Research releases, product launches, and safety updates from OpenAI.",
     ["models", "research", "product"], True),
    ("google-ai-blog", "Google AI Blog", "https://blog.google/technology/ai/rss/", SourceKind.RSS, "Labs",
     "Updates on Google research, Gemini, and applied AI.",
     ["research", "product", "enterprise"], True),
    ("deepmind-blog", "DeepMind Blog", "https://deepmind.google/blog/rss.xml", SourceKind.RSS, "Labs",
     "Research highlights and frontier model advances from DeepMind.",
     ["research", "frontier"], True),
    ("anthropic-news", "Anthropic News", "https://www.anthropic.com/news.rss", SourceKind.RSS, "Labs",
     "Anthropic announcements, research, and safety notes.",
     ["safety", "models"], True),
    ("the-verge-ai", "The Verge AI", "https://www.theverge.com/rss/ai/index.xml", SourceKind.RSS, "Media",
     "Mainstream coverage of AI products and industry moves.",
     ["product", "industry"], True),
    ("techcrunch-ai", "TechCrunch AI", "https://techcrunch.com/tag/artificial-intelligence/feed/",
     SourceKind.RSS, "Media",
     "Startup funding, product launches, and market coverage.",
     ["startups", "funding"], True),
    ("venturebeat-ai", "VentureBeat AI", "https://venturebeat.com/category/ai/feed/", SourceKind.RSS, "Media",
     "Enterprise AI news, tooling, and market analysis.",
     ["enterprise", "tools"], True),
    ("mit-tech-review-ai", "MIT Technology Review AI",
     "https://www.technologyreview.com/topic/artificial-intelligence/feed/", SourceKind.RSS, "Media",
     "High-quality reporting on AI research and impact.",
     ["policy", "research"], True),
    ("ars-technica-ai", "Ars Technica AI", "https://feeds.arstechnica.com/arstechnica/technology-lab",
     SourceKind.RSS, "Media",
     "Technical coverage of AI and computing trends.",
     ["technical", "industry"], True),
    ("the-decoder", "The Decoder", "https://the-decoder.com/feed/", SourceKind.RSS, "Media",
     "Daily AI coverage with product and lab updates.",
     ["daily", "product"], True),
    ("hugging-face-blog", "Hugging Face Blog", "https://huggingface.co/blog/feed.xml", SourceKind.RSS,
     "Community",
     "Open-source models, datasets, and tutorials.",
     ["open-source", "tools"], True),
    ("hacker-news-ai", "Hacker News AI Search", "https://hnrss.org/newest?q=artificial%20intelligence",
     SourceKind.RSS, "Community",
     "Fresh AI links from the HN community.",
     ["community", "links"], False),
    ("reddit-ml", "Reddit r/MachineLearning", "https://www.reddit.com/r/MachineLearning/.rss",
     SourceKind.RSS, "Community",
     "Research discussions, paper highlights, and debates.",
     ["research", "discussion"], False),
    ("papers-with-code", "Papers with Code", "https://paperswithcode.com/feed.xml", SourceKind.RSS, "Research",
     "New papers with code implementations.",
     ["research", "code"], False),
    ("arxiv-cs-ai", "arXiv AI (cs.AI)", "http://export.arxiv.org/rss/cs.AI", SourceKind.RSS, "Research",
     "Latest arXiv submissions in AI.",
     ["research", "papers"], False),
    ("arxiv-cs-lg", "arXiv Machine Learning (cs.LG)", "http://export.arxiv.org/rss/cs.LG", SourceKind.RSS,
     "Research",
     "Latest arXiv submissions in machine learning.",
     ["research", "papers"], False),
    ("nvidia-ai-blog", "NVIDIA AI Blog", "https://blogs.nvidia.com/blog/category/deep-learning/feed/",
     SourceKind.RSS, "Labs",
     "Infrastructure and model updates from NVIDIA.",
     ["hardware", "infrastructure"], False),
    ("stanford-hai", "Stanford HAI News", "https://hai.stanford.edu/news/rss.xml", SourceKind.RSS, "Policy",
     "Academic research, policy, and societal impact.",
     ["policy", "academic"], False),
    ("oecd-ai-policy", "OECD AI Policy", "https://oecd.ai/en/rss", SourceKind.RSS, "Policy",
     "Global policy updates and AI governance.",
     ["policy", "government"], False),
    ("partnership-on-ai", "Partnership on AI", "https://partnershiponai.org/feed/", SourceKind.RSS, "Policy",
     "Best practices and policy frameworks.",
     ["policy", "ethics"], False),
    ("xai-social", "xAI", "https://x.com/xai", SourceKind.SOCIAL, "Social",
     "Updates and announcements from xAI.",
     ["social", "announcements"], False),
    ("openai-social", "OpenAI", "https://x.com/OpenAI", SourceKind.SOCIAL, "Social",
     "Official OpenAI social updates.",
     ["social", "announcements"], False),
    ("deepmind-social", "Google DeepMind", "https://x.com/GoogleDeepMind", SourceKind.SOCIAL, "Social",
     "DeepMind social updates and research signals.",
     ["social", "research"], False),
]


def default_sources() -> list[Source]:
    """Fresh Source records for the default catalog."""
    return [
        Source(
            id=source_id,
            name=name,
            url=url,
            kind=kind,
            enabled=enabled,
            category=category,
            summary=summary,
            tags=list(tags),
        )
        for source_id, name, url, kind, category, summary, tags, enabled in _CORE_SOURCES
    ]

