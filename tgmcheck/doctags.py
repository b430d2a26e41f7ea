"""Tag/value extraction from documentation comment blocks."""

from __future__ import annotations

from .models import DocBlock, DocTagSet
from .source import TokenSource


class DocTagExtractor:
    """Turns a doc block into a mapping of tag name to tag value."""

    def extract(self, source: TokenSource, block: DocBlock) -> DocTagSet:
        """Return the tags of ``block``; later duplicates overwrite earlier ones."""
        tags: DocTagSet = {}
        if not block.tags:
            return tags

        tag_count = len(block.tags)
        for index, tag_position in enumerate(block.tags):
            tag_token = source.token_at(tag_position)
            if tag_token is None:
                continue
            name = tag_token.content.strip().lstrip("@")
            if not name:
                continue

            search_end = block.closer
            if index + 1 < tag_count:
                search_end = block.tags[index + 1]

            value_token = source.find_doc_string(tag_position, search_end)
            tags[name] = value_token.content.strip() if value_token is not None else ""
        return tags


__all__ = ["DocTagExtractor"]
