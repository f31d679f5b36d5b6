"""
AI prompts used by the summarization client.

Prompts live here so they can be tuned without touching request code.
"""

from ..crawler.base import Article


SUMMARY_MIN_WORDS = 200
SUMMARY_MAX_WORDS = 300


class SummaryPrompts:
    """Prompts for article summarization."""

    SYSTEM = (
        "You are a professional news summarization assistant. Given a news article, "
        "write a concise and accurate summary that keeps the article's core facts, "
        "names, numbers and dates. Do not add information that is not in the text. "
        "Answer in the language of the article."
    )

    @staticmethod
    def truncate(content: str, limit: int) -> str:
        """Cut content to ``limit`` characters, marking the cut."""
        if len(content) <= limit:
            return content
        return content[:limit] + "..."

    @staticmethod
    def article_summary(article: Article, content_limit: int = 3000) -> str:
        """Build the user prompt for one article."""
        prompt = f"Title: {article.title}\n\n"

        if article.author:
            prompt += f"Author: {article.author}\n\n"

        if article.publish_date:
            prompt += f"Published: {article.publish_date.isoformat()}\n\n"

        content = SummaryPrompts.truncate(article.content or "", content_limit)
        prompt += f"Content:\n{content}\n\n"
        prompt += (
            f"Write a {SUMMARY_MIN_WORDS}-{SUMMARY_MAX_WORDS} word summary of this article:"
        )
        return prompt
