"""Twitch Helix API reference parser.

Walks the documentation sections of the reference page and converts each
one into an EndpointRecord. Every rule here degrades to an empty value when
the markup it expects is missing; only a section without a title is
dropped.
"""

import logging
from collections.abc import Iterator
from functools import reduce
from typing import NamedTuple

from helix_endpoints.config import HELIX_BASE_URL, REFERENCE_URL

from .base import APP_TOKEN, USER_TOKEN, EndpointRecord, EndpointSpec, ExamplePair, ParamRow
from .tree import DocNode

logger = logging.getLogger(__name__)

SECTION_SELECTOR = "body > div.main > section.doc-content"
TITLE_SELECTOR = ".left-docs h2"
EXAMPLES_SELECTOR = ".right-code"

HEADING_TAGS = ("h1", "h2", "h3", "h4")
SCOPE_TAGS = ("strong", "b")
CODE_BLOCK_TAGS = ("pre", "div")

# Cell index -> ParamRow field
QUERY_COLUMNS = ("name", "type", "required", "description")
BODY_COLUMNS = ("name", "type", "description")

READ_MORE = "Read More"


class Section(NamedTuple):
    node: DocNode
    title: str
    docs_link: str


def extract_endpoints(
    root: DocNode,
    reference_url: str = REFERENCE_URL,
    helix_base: str = HELIX_BASE_URL,
) -> list[EndpointRecord]:
    """Extract one EndpointRecord per titled section, in document order."""
    records = [build_record(section, helix_base) for section in iter_sections(root, reference_url)]
    logger.info("Extracted %d endpoints", len(records))
    return records


def iter_sections(root: DocNode, reference_url: str = REFERENCE_URL) -> Iterator[Section]:
    """Yield the documentation sections that carry a title heading."""
    for node in root.select(SECTION_SELECTOR):
        heading = node.select_one(TITLE_SELECTOR)
        title = heading.text.strip() if heading is not None else ""
        if not title:
            logger.debug("Skipping untitled section %r", node)
            continue
        yield Section(node, title, f"{reference_url}#{heading.get('id') or ''}")


def build_record(section: Section, helix_base: str = HELIX_BASE_URL) -> EndpointRecord:
    node = section.node
    return EndpointRecord(
        docs_link=section.docs_link,
        title=section.title,
        description=_text(node.select_one("p")),
        token_types=extract_token_types(node),
        endpoint_spec=extract_endpoint_spec(node, helix_base),
        request_params=extract_param_table(node, "Request Query Parameters", QUERY_COLUMNS),
        body_params=extract_param_table(node, "Request Body", BODY_COLUMNS),
        response_params=extract_param_table(node, "Response Body", BODY_COLUMNS),
        examples=extract_examples(node),
    )


def find_heading(section: DocNode, label: str) -> DocNode | None:
    """First h3 in the section whose text contains `label`."""
    return next((h for h in section.select("h3") if label in h.text), None)


def extract_endpoint_spec(section: DocNode, helix_base: str = HELIX_BASE_URL) -> EndpointSpec:
    paragraph = _next_tag(find_heading(section, "URL"), "p")
    code = paragraph.select_one("code") if paragraph is not None else None
    return parse_url_line(_text(code), helix_base)


def parse_url_line(line: str, helix_base: str = HELIX_BASE_URL) -> EndpointSpec:
    """Split "GET https://api.twitch.tv/helix/users" into method and path.

    Some entries omit the verb; a lone token is the path and the method
    falls back to GET.
    """
    tokens = line.split(None, 1)
    if len(tokens) == 2:
        method, path = tokens
    elif tokens:
        method, path = "GET", tokens[0]
    else:
        method, path = "", ""

    path = path.strip().removeprefix(helix_base)
    return EndpointSpec(http_method=method, path=path, full_path=f"{helix_base}{path}")


def extract_token_types(section: DocNode) -> dict[str, bool | tuple[str, ...]]:
    paragraph = _next_tag(find_heading(section, "Authorization"), "p")
    if paragraph is None:
        return {}
    _, tokens = reduce(_token_step, paragraph.children(), (None, {}))
    return tokens


def _token_step(state, node: DocNode):
    """Token kinds are links; the scopes that follow them are bold."""
    kind, tokens = state
    if node.tag == "a":
        label = node.text.lower()
        kind = APP_TOKEN if "app" in label else USER_TOKEN if "user" in label else None

    if kind is None:
        return kind, tokens

    scopes = tokens.get(kind, True)
    if node.tag in SCOPE_TAGS:
        scope = node.text.strip()
        scopes = (*scopes, scope) if isinstance(scopes, tuple) else (scope,)
    return kind, {**tokens, kind: scopes}


def extract_param_table(section: DocNode, heading: str, columns: tuple[str, ...]) -> tuple[ParamRow, ...]:
    """Read the table right after `heading`, mapping cell i to `columns[i]`."""
    table = _next_tag(find_heading(section, heading), "table")
    if table is None:
        return ()
    return tuple(_param_row(row, columns) for row in _table_rows(table))


def clean_description(text: str) -> str:
    """Drop the "Read More" toggle the page renders as trailing text."""
    return text.strip().removesuffix(READ_MORE).strip()


def _table_rows(table: DocNode) -> list[DocNode]:
    rows = table.select("tbody > tr")
    if rows:
        return rows
    return [tr for tr in table.select("tr") if tr.select_one("td") is not None]


def _param_row(row: DocNode, columns: tuple[str, ...]) -> ParamRow:
    cells = row.children()
    values = {}
    for index, field in enumerate(columns):
        text = cells[index].text if index < len(cells) else ""
        if field == "required":
            values[field] = "Yes" in text
        elif field == "description":
            values[field] = clean_description(text)
        else:
            values[field] = text.strip()
    return ParamRow(**values)


def extract_examples(section: DocNode) -> tuple[ExamplePair, ...]:
    region = section.select_one(EXAMPLES_SELECTOR)
    if region is None:
        return ()
    examples, _ = reduce(_example_step, region.children(), ((), None))
    return examples


def _example_step(state, node: DocNode):
    """A Request heading opens an example; the next Response heading closes it.

    Opening a new example while one is still pending drops the pending one.
    """
    examples, pending = state
    if node.tag != "h3":
        return state

    label = node.text
    if "Request" in label:
        pending = ExamplePair(
            description=_text(_next_tag(node, "p")),
            request=_text(_following_block(node, CODE_BLOCK_TAGS)),
        )

    if pending is not None and "Response" in label:
        response = _text(_following_block(node, CODE_BLOCK_TAGS))
        return (*examples, pending.model_copy(update={"response": response})), None

    return examples, pending


def _next_tag(node: DocNode | None, tag: str) -> DocNode | None:
    """The element immediately after `node`, if it is a `tag`."""
    if node is None:
        return None
    following = node.next_element()
    if following is not None and following.tag == tag:
        return following
    return None


def _following_block(node: DocNode, tags: tuple[str, ...]) -> DocNode | None:
    """First later sibling with one of `tags`, stopping at the next heading."""
    for el in node.following_elements():
        if el.tag in HEADING_TAGS:
            return None
        if el.tag in tags:
            return el
    return None


def _text(node: DocNode | None) -> str:
    return node.text.strip() if node is not None else ""
