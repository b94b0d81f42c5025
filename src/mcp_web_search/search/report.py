"""Plain-text rendering of search results for the calling agent."""

from typing import Iterable


def format_report(query: str, results: Iterable) -> str:
    """
    Render results as a numbered list of title, link and snippet.

    Results keep the provider's order. An empty result set still produces a
    report that says so.
    """
    results = list(results)
    text = f"Search results for: {query}\n\n"
    if not results:
        return text + "No results found."

    text += "Web Results:\n"
    for index, result in enumerate(results, start=1):
        text += f"{index}. {result.title}\n"
        text += f"   {result.link}\n"
        text += f"   {result.snippet}\n\n"
    return text


__all__ = ["format_report"]
