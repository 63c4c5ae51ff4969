"""Property listing data models."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class CityEntry:
    """A city option read from the search form's city dropdown."""

    code: str
    name: str


class CityUrls(BaseModel):
    """Detail-page URLs collected for one city."""

    model_config = ConfigDict(populate_by_name=True)

    city_name: str = Field(..., alias="cidade", description="City display name")
    urls: list[str] = Field(default_factory=list, description="Detail-page URLs")


# City code -> collected URLs, serialized as the city-index file
CityUrlIndex = dict[str, CityUrls]


def _column(key: str, description: str):
    return Field("", alias=f"_imoveis_{key}", description=description)


class PropertyRecord(BaseModel):
    """One foreclosure property extracted from a detail page.

    Every field is a string and defaults to "" so that partially populated
    pages still produce a full row. Aliases are the column names expected
    by the import endpoint and used in the spreadsheet header.
    """

    model_config = ConfigDict(populate_by_name=True)

    codigo_imovel: str = _column("codigo_imovel", "Internal listing code")
    titulo: str = _column("titulo", "Listing title")

    valor_avaliacao: str = _column("valor_avaliacao", "Appraisal value (BRL text)")
    valor_minimo_1_leilao: str = _column("valor_minimo_1_leilao", "Minimum bid, 1st auction")
    valor_minimo_2_leilao: str = _column("valor_minimo_2_leilao", "Minimum bid, 2nd auction")
    valor_minimo_generico: str = _column("valor_minimo_generico", "Minimum sale value (single-minimum pages)")
    valor_minimo: str = _column("valor_minimo", "Smallest minimum found")
    desconto_percentual: str = _column("desconto_percentual", "Discount over appraisal, e.g. '20,00%'")
    desconto_pct: str = _column("desconto_pct", "Same as desconto_percentual")

    tipo_imovel: str = _column("tipo_imovel", "Property type")
    quartos: str = _column("quartos", "Bedrooms")
    garagem: str = _column("garagem", "Parking spaces")
    numero_imovel: str = _column("numero_imovel", "Listing number")
    matricula: str = _column("matricula", "Registration number")
    comarca: str = _column("comarca", "Court district")
    oficio: str = _column("oficio", "Registry office")
    inscricao_imobiliaria: str = _column("inscricao_imobiliaria", "Property tax record")
    averbacao_leiloes: str = _column("averbacao_leiloes", "Negative auction annotation")

    area_total: str = _column("area_total", "Total area")
    area_privativa: str = _column("area_privativa", "Private area")
    area_terreno: str = _column("area_terreno", "Land area")

    tipo_leilao: str = _column("tipo_leilao", "Auction type")
    edital: str = _column("edital", "Auction notice")
    leiloeiro: str = _column("leiloeiro", "Auctioneer")
    numero_item: str = _column("numero_item", "Item number")
    data_leilao_1: str = _column("data_leilao_1", "1st auction date line")
    data_leilao_2: str = _column("data_leilao_2", "2nd auction date line")

    endereco_completo: str = _column("endereco_completo", "Full address line")
    endereco_logradouro: str = _column("endereco_logradouro", "Street")
    endereco_numero: str = _column("endereco_numero", "House number")
    endereco_bairro_texto: str = _column("endereco_bairro_texto", "Neighborhood from the address")
    endereco_cidade_texto: str = _column("endereco_cidade_texto", "City from the address")
    endereco_estado_texto: str = _column("endereco_estado_texto", "State from the address")
    cep: str = _column("cep", "Postal code")

    descricao: str = _column("descricao", "Description")
    formas_pagamento: str = _column("formas_pagamento", "Accepted payment terms")
    link_matricula: str = _column("link_matricula", "Registration document URL")
    link_edital: str = _column("link_edital", "Auction notice document URL")

    imgs_lista: str = _column("imgs_lista", "Pipe-joined image URLs")

    estado: str = _column("estado", "State code")
    cidade_codigo: str = _column("cidade_codigo", "City code")
    cidade: str = _column("cidade", "City name")
    bairro: str = _column("bairro", "Neighborhood")

    def to_row(self) -> dict[str, str]:
        """Export keyed by column name, in column order."""
        return self.model_dump(by_alias=True)


# Fixed column order for every tabular export
PROPERTY_COLUMNS: tuple[str, ...] = tuple(
    field.alias for field in PropertyRecord.model_fields.values()
)
