"""Queryable document tree used by the Helix extractor.

The extractor only talks to `DocNode`, so it runs the same against the
BeautifulSoup-backed `SoupNode` or any small in-memory tree that
implements these methods.
"""

from collections.abc import Iterator
from typing import Protocol

from bs4 import BeautifulSoup, Tag


class DocNode(Protocol):
    """The query surface the extractor needs from an HTML element."""

    @property
    def tag(self) -> str: ...

    @property
    def text(self) -> str: ...

    def get(self, attr: str) -> str | None: ...

    def select(self, selector: str) -> list["DocNode"]: ...

    def select_one(self, selector: str) -> "DocNode | None": ...

    def children(self) -> list["DocNode"]: ...

    def next_element(self) -> "DocNode | None": ...

    def following_elements(self) -> Iterator["DocNode"]: ...


class SoupNode:
    """`DocNode` over a BeautifulSoup tag. Text nodes are never exposed."""

    def __init__(self, element: Tag):
        self.element = element

    @classmethod
    def from_html(cls, html: str | bytes, features: str = "html.parser") -> "SoupNode":
        return cls(BeautifulSoup(html, features))

    @property
    def tag(self) -> str:
        return self.element.name

    @property
    def text(self) -> str:
        return self.element.get_text()

    def get(self, attr: str) -> str | None:
        value = self.element.get(attr)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def select(self, selector: str) -> list["SoupNode"]:
        return [SoupNode(el) for el in self.element.select(selector)]

    def select_one(self, selector: str) -> "SoupNode | None":
        el = self.element.select_one(selector)
        return SoupNode(el) if el is not None else None

    def children(self) -> list["SoupNode"]:
        return [SoupNode(el) for el in self.element.children if isinstance(el, Tag)]

    def next_element(self) -> "SoupNode | None":
        el = self.element.find_next_sibling()
        return SoupNode(el) if el is not None else None

    def following_elements(self) -> Iterator["SoupNode"]:
        for el in self.element.find_next_siblings():
            yield SoupNode(el)

    def __repr__(self) -> str:
        return f"SoupNode(<{self.tag}>)"
