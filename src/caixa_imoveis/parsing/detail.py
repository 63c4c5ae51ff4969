"""Detail page extraction.

Works on the rendered HTML of ``detalhe-imovel.asp`` so that every rule can
be exercised without a browser. Page structure (observed 2025):
- ``#dadosImovel``: heading (h5) with the title, a paragraph with the
  appraisal/minimum values and two ``.control-span-6_12`` info columns
  (labeled attributes on the left, areas on the right)
- ``.related-box``: auction type, notice, auctioneer, dates, address,
  description, payment terms and document links
- ``#galeria-imagens .thumbnails img``: photo thumbnails
- hidden inputs ``#hdnimovel``, ``#hdn_estado``, ``#hdn_cidade``, ``#hdn_bairro``
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..models.property import PropertyRecord
from .text import (
    collapse_whitespace,
    compute_discount,
    format_brl_number,
    normalize_text,
    parse_brl,
)

DETAIL_CONTAINER_SELECTOR = "#dadosImovel"
VALUES_PARAGRAPH_SELECTOR = "#dadosImovel .content p"
INFO_COLUMNS_SELECTOR = "#dadosImovel .content .control-item.control-span-6_12"
RELATED_BOX_SELECTOR = ".related-box"
AUCTION_TYPE_SELECTORS = (
    "#divContador .control-span-12_12 span b",
    "#divContador b",
    "div span b",
)
GALLERY_IMAGE_SELECTOR = "#galeria-imagens .thumbnails img"
REGISTRATION_LINK_SELECTOR = "a[onclick*='ExibeDoc'][onclick*='/matricula/']"
DOCUMENT_LINK_SELECTOR = "a[onclick*='ExibeDoc']"

# Checked in order; the first non-empty attribute wins
IMAGE_SOURCE_ATTRIBUTES = ("src", "data-lazy-src", "data-src", "data-original")

# Tags whose boundaries break text lines
_BLOCK_TAGS = frozenset({
    "address", "article", "div", "dd", "dl", "dt", "footer", "form",
    "h1", "h2", "h3", "h4", "h5", "h6", "header", "li", "ol", "p",
    "section", "table", "td", "th", "tr", "ul",
})
_SKIPPED_TAGS = frozenset({"script", "style", "template", "noscript"})

_APPRAISAL_RE = re.compile(r"Valor de avalia[çc][ãa]o:\s*R\$\s*([\d.,]+)", re.I)
_MINIMUM_1_RE = re.compile(r"Valor m[íi]nimo de venda\s*1[º°o]\s*Leil[ãa]o:\s*R\$\s*([\d.,]+)", re.I)
_MINIMUM_2_RE = re.compile(r"Valor m[íi]nimo de venda\s*2[º°o]\s*Leil[ãa]o:\s*R\$\s*([\d.,]+)", re.I)
_MINIMUM_GENERIC_RE = re.compile(r"Valor m[íi]nimo de venda:\s*R\$\s*([\d.,]+)", re.I)

_NOTICE_PREFIX_RE = re.compile(r"^Edital\s*:\s*", re.I)
_AUCTIONEER_PREFIX_RE = re.compile(r"^Leiloeiro(?:\(a\))?\s*:\s*", re.I)
_ITEM_PREFIX_RE = re.compile(r"^N[úu]mero do item\s*:\s*", re.I)
_FIRST_AUCTION_DATE_RE = re.compile(r"data do 1\s*[º°o]\s*leilao")
_SECOND_AUCTION_DATE_RE = re.compile(r"data do 2\s*[º°o]\s*leilao")
_ADDRESS_PREFIX_RE = re.compile(r"^Endere[çc]o\s*:\s*", re.I)
_DESCRIPTION_PREFIX_RE = re.compile(r"^Descri[çc][ãa]o\s*:\s*", re.I)
_PAYMENT_MARKER = "FORMAS DE PAGAMENTO ACEITAS"

_DOCUMENT_HANDLER_RE = re.compile(r"ExibeDoc\(['\"]([^'\"]+)['\"]\)", re.I)

_POSTAL_CODE_RE = re.compile(r"CEP:\s*([\d\-]+)", re.I)
_TRAILING_COMMA_RE = re.compile(r"\s*,\s*$")
_HOUSE_NUMBER_RE = re.compile(r"N[º°.]?\s*(\d+)", re.I)
_TRAILING_DASH_RE = re.compile(r"-\s*$")
_CITY_STATE_RE = re.compile(r"^(.+?)\s*-\s*([A-Z]{2})$", re.I)
_LEADING_ASTERISK_RE = re.compile(r"^\s*\*?\s*")


@dataclass(frozen=True)
class ListingContext:
    """What the caller already knows about a listing's location."""

    region: str = ""
    city_code: str = ""
    city_name: str = ""


# =============================================================================
# Labeled attributes
# =============================================================================

def strip_leading_asterisk(value: str) -> str:
    return _LEADING_ASTERISK_RE.sub("", value).strip()


@dataclass(frozen=True)
class LabelRule:
    """Find a labeled line and take the text after its separator.

    A line matches when its normalized form starts with or contains the
    normalized label. Separators are tried in order; the first one present
    in the line is used.
    """

    field: str
    label: str
    separators: tuple[str, ...] = (":",)
    post_process: Callable[[str], str] | None = None

    def extract(self, lines: Iterable[str]) -> str:
        wanted = normalize_text(self.label)
        row = next(
            (line for line in lines if wanted in normalize_text(line)),
            None,
        )
        if row is None:
            return ""

        separator = next((sep for sep in self.separators if sep in row), None)
        if separator is None:
            return ""
        value = row.partition(separator)[2].strip()
        if self.post_process is not None:
            value = self.post_process(value)
        return value


# Left info column: "Label: value"
ATTRIBUTE_RULES = (
    LabelRule("tipo_imovel", "Tipo de imóvel"),
    LabelRule("quartos", "Quartos"),
    LabelRule("garagem", "Garagem"),
    LabelRule("numero_imovel", "Número do imóvel"),
    LabelRule("matricula", "Matrícula"),
    LabelRule("comarca", "Comarca"),
    LabelRule("oficio", "Ofício"),
    LabelRule("inscricao_imobiliaria", "Inscrição imobiliária"),
    LabelRule("averbacao_leiloes", "Averbação dos leilões negativos"),
)

# Right info column: "Label = *value" on most templates, "Label: value" on some
AREA_RULES = (
    LabelRule("area_total", "Área total", ("=", ":"), strip_leading_asterisk),
    LabelRule("area_privativa", "Área privativa", ("=", ":"), strip_leading_asterisk),
    LabelRule("area_terreno", "Área do terreno", ("=", ":"), strip_leading_asterisk),
)


def apply_rules(rules: Iterable[LabelRule], lines: list[str]) -> dict[str, str]:
    return {rule.field: rule.extract(lines) for rule in rules}


# =============================================================================
# Helpers
# =============================================================================

def _rendered_text(node) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if node.name == "br":
        return "\n"
    if node.name in _SKIPPED_TAGS:
        return ""
    inner = "".join(_rendered_text(child) for child in node.children)
    if node.name in _BLOCK_TAGS:
        return f"\n{inner}\n"
    return inner


def _text(element: Tag | None) -> str:
    """Visible text with inline markup joined as-is.

    Only line breaks and block boundaries separate words, so values split
    by ``<b>``/``<sup>`` tags stay intact.
    """
    if element is None:
        return ""
    return collapse_whitespace(_rendered_text(element))


def _input_value(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    return (element.get("value") or "").strip()


def page_origin(url: str) -> str:
    """Return 'scheme://host' for a URL, or '' if it has none."""
    parts = urlsplit(url or "")
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


def resolve_url(value: str, origin: str) -> str:
    """Resolve a relative path against the page origin.

    Falls back to the raw value when there is no origin or resolution fails.
    """
    if not origin:
        return value
    try:
        return urljoin(origin + "/", value)
    except ValueError:
        return value


def resolve_against_page(value: str, page_url: str) -> str:
    """Resolve a path relative to the page's own URL, as a browser does."""
    if not page_origin(page_url):
        return value
    try:
        return urljoin(page_url, value)
    except ValueError:
        return value


def document_link(anchor: Tag | None, origin: str) -> str:
    """Absolute URL from an anchor's ``ExibeDoc('<path>')`` click handler."""
    if anchor is None:
        return ""
    match = _DOCUMENT_HANDLER_RE.search(anchor.get("onclick") or "")
    if not match:
        return ""
    return resolve_url(match.group(1), origin)


# =============================================================================
# Sections
# =============================================================================

def extract_title(container: Tag | None) -> str:
    """Title from the heading's leading text node, excluding trailing badges."""
    if container is None:
        return ""
    heading = container.select_one("h5")
    if heading is None:
        return ""
    first = heading.contents[0] if heading.contents else None
    if isinstance(first, NavigableString) and not isinstance(first, Comment):
        return collapse_whitespace(str(first))
    return _text(heading)


def extract_values(text: str) -> dict[str, str]:
    """Parse appraisal and minimum sale values from the values paragraph.

    The generic "Valor mínimo de venda" is only used when neither the 1st
    nor the 2nd auction minimum is present.
    """
    text = collapse_whitespace(text)

    def first_group(pattern: re.Pattern) -> str:
        match = pattern.search(text)
        return match.group(1).strip() if match else ""

    appraisal = first_group(_APPRAISAL_RE)
    minimum_1 = first_group(_MINIMUM_1_RE)
    minimum_2 = first_group(_MINIMUM_2_RE)
    generic = ""
    if not minimum_1 and not minimum_2:
        generic = first_group(_MINIMUM_GENERIC_RE)

    candidates = [
        value for value in (parse_brl(minimum_1), parse_brl(minimum_2), parse_brl(generic))
        if value is not None
    ]
    overall = min(candidates) if candidates else None
    discount = compute_discount(parse_brl(appraisal), overall)

    return {
        "valor_avaliacao": appraisal,
        "valor_minimo_1_leilao": minimum_1,
        "valor_minimo_2_leilao": minimum_2,
        "valor_minimo_generico": generic,
        "valor_minimo": format_brl_number(overall) if overall is not None else "",
        "desconto_percentual": discount,
        "desconto_pct": discount,
    }


def _values_paragraph(soup: BeautifulSoup) -> str:
    for paragraph in soup.select(VALUES_PARAGRAPH_SELECTOR):
        text = _text(paragraph)
        if "valor de avaliacao" in normalize_text(text):
            return text
    return ""


def _column_lines(column: Tag) -> list[str]:
    return [_text(span) for span in column.find_all("span")]


def extract_auction_info(box: Tag | None) -> dict[str, str]:
    """Auction metadata, dates, address, description and payment terms."""
    info = {
        "tipo_leilao": "",
        "edital": "",
        "leiloeiro": "",
        "numero_item": "",
        "data_leilao_1": "",
        "data_leilao_2": "",
        "endereco_completo": "",
        "descricao": "",
        "formas_pagamento": "",
    }
    if box is None:
        return info

    for selector in AUCTION_TYPE_SELECTORS:
        type_node = box.select_one(selector)
        if type_node is not None:
            info["tipo_leilao"] = _text(type_node)
            break

    for span in box.find_all("span"):
        line = _text(span)
        key = normalize_text(line)
        if key.startswith("edital"):
            info["edital"] = _NOTICE_PREFIX_RE.sub("", line).strip()
        elif key.startswith("leiloeiro"):
            info["leiloeiro"] = _AUCTIONEER_PREFIX_RE.sub("", line).strip()
        elif key.startswith("numero do item"):
            info["numero_item"] = _ITEM_PREFIX_RE.sub("", line).strip()
        elif _FIRST_AUCTION_DATE_RE.search(key):
            info["data_leilao_1"] = line
        elif _SECOND_AUCTION_DATE_RE.search(key):
            info["data_leilao_2"] = line

    for paragraph in box.find_all("p"):
        line = _text(paragraph)
        key = normalize_text(line)
        if key.startswith("endereco:"):
            info["endereco_completo"] = _ADDRESS_PREFIX_RE.sub("", line).strip()
        elif key.startswith("descricao:"):
            info["descricao"] = _DESCRIPTION_PREFIX_RE.sub("", line).strip()
        elif _PAYMENT_MARKER in line.upper():
            info["formas_pagamento"] = line

    return info


def extract_document_links(soup: BeautifulSoup, box: Tag | None, origin: str) -> dict[str, str]:
    """Registration document and auction notice URLs."""
    registration = ""
    if box is not None:
        registration = document_link(box.select_one(REGISTRATION_LINK_SELECTOR), origin)
    if not registration:
        registration = document_link(soup.select_one(REGISTRATION_LINK_SELECTOR), origin)

    notice_anchor = next(
        (
            anchor for anchor in soup.select(DOCUMENT_LINK_SELECTOR)
            if "BAIXAR EDITAL" in _text(anchor).upper()
        ),
        None,
    )
    return {
        "link_matricula": registration,
        "link_edital": document_link(notice_anchor, origin),
    }


@dataclass
class AddressParts:
    """Best-effort decomposition of 'Street, Nº 1, District, CEP: x, City - UF'."""

    street: str = ""
    number: str = ""
    neighborhood: str = ""
    postal_code: str = ""
    city: str = ""
    state: str = ""


def split_address(address: str) -> AddressParts:
    """Split a comma-delimited address line into its parts.

    Addresses that don't follow the convention yield partially empty parts.
    """
    parts = AddressParts()
    if not address:
        return parts

    remainder = address
    postal = _POSTAL_CODE_RE.search(remainder)
    if postal:
        parts.postal_code = postal.group(1).strip()
        remainder = remainder.replace(postal.group(0), "", 1)
        remainder = _TRAILING_COMMA_RE.sub("", remainder)

    pieces = [piece.strip() for piece in remainder.split(",") if piece.strip()]

    if len(pieces) >= 1:
        parts.street = pieces[0]
    if len(pieces) >= 2:
        number = _HOUSE_NUMBER_RE.search(pieces[1])
        if number:
            parts.number = number.group(1)
    if len(pieces) >= 3:
        parts.neighborhood = _TRAILING_DASH_RE.sub("", pieces[2]).strip()
    if len(pieces) >= 4:
        last = pieces[-1]
        city_state = _CITY_STATE_RE.match(last)
        if city_state:
            parts.city = city_state.group(1).strip()
            parts.state = city_state.group(2).upper()
        else:
            parts.city = last
    return parts


def extract_images(soup: BeautifulSoup, page_url: str) -> list[str]:
    """Gallery image URLs in page order, empties dropped.

    ``src`` resolves against the page URL like the browser does; lazy-load
    attributes resolve against the site origin.
    """
    origin = page_origin(page_url)
    images = []
    for img in soup.select(GALLERY_IMAGE_SELECTOR):
        attr, source = next(
            (
                (attr, img.get(attr).strip()) for attr in IMAGE_SOURCE_ATTRIBUTES
                if img.get(attr) and img.get(attr).strip()
            ),
            (None, ""),
        )
        if not source:
            continue
        if attr == "src":
            images.append(resolve_against_page(source, page_url))
        else:
            images.append(resolve_url(source, origin))
    return images


# =============================================================================
# Page
# =============================================================================

def parse_detail_page(html: str, page_url: str, context: ListingContext | None = None) -> PropertyRecord:
    """Extract a PropertyRecord from a rendered detail page.

    Missing sections leave their fields empty; partial extraction is normal.

    Args:
        html: Rendered page HTML.
        page_url: URL the page was loaded from, used to resolve relative links.
        context: Region/city known by the caller, used when the page's hidden
            fields are empty.

    Returns:
        The extracted record.
    """
    context = context or ListingContext()
    soup = BeautifulSoup(html, "html.parser")
    origin = page_origin(page_url)
    container = soup.select_one(DETAIL_CONTAINER_SELECTOR)

    fields: dict[str, str] = {
        "codigo_imovel": _input_value(soup, "#hdnimovel"),
        "titulo": extract_title(container),
    }
    fields.update(extract_values(_values_paragraph(soup)))

    columns = soup.select(INFO_COLUMNS_SELECTOR)
    if len(columns) >= 1:
        fields.update(apply_rules(ATTRIBUTE_RULES, _column_lines(columns[0])))
    if len(columns) >= 2:
        fields.update(apply_rules(AREA_RULES, _column_lines(columns[1])))

    box = soup.select_one(RELATED_BOX_SELECTOR)
    fields.update(extract_auction_info(box))
    fields.update(extract_document_links(soup, box, origin))

    address = split_address(fields["endereco_completo"])
    fields.update({
        "endereco_logradouro": address.street,
        "endereco_numero": address.number,
        "endereco_bairro_texto": address.neighborhood,
        "endereco_cidade_texto": address.city,
        "endereco_estado_texto": address.state,
        "cep": address.postal_code,
    })

    fields["imgs_lista"] = "|".join(extract_images(soup, page_url))

    # Hidden fields beat caller context; caller's city name beats the address
    fields["estado"] = _input_value(soup, "#hdn_estado") or context.region
    fields["cidade_codigo"] = _input_value(soup, "#hdn_cidade") or context.city_code
    fields["bairro"] = _input_value(soup, "#hdn_bairro") or address.neighborhood
    fields["cidade"] = context.city_name or address.city

    return PropertyRecord(**fields)
