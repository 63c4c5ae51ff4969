"""Tests for data models."""

from caixa_imoveis.models.property import (
    CityEntry,
    CityUrls,
    PropertyRecord,
    PROPERTY_COLUMNS,
)


class TestPropertyRecord:
    """Tests for PropertyRecord model."""

    def test_all_fields_default_to_empty(self):
        """A record with nothing set still has every column."""
        row = PropertyRecord().to_row()
        assert list(row) == list(PROPERTY_COLUMNS)
        assert all(value == "" for value in row.values())

    def test_populate_by_field_name(self):
        record = PropertyRecord(titulo="Casa", cep="76800-000")
        assert record.titulo == "Casa"
        assert record.to_row()["_imoveis_cep"] == "76800-000"

    def test_populate_by_column_name(self):
        record = PropertyRecord.model_validate({"_imoveis_quartos": "3"})
        assert record.quartos == "3"

    def test_column_order(self):
        assert len(PROPERTY_COLUMNS) == 43
        assert PROPERTY_COLUMNS[0] == "_imoveis_codigo_imovel"
        assert PROPERTY_COLUMNS[1] == "_imoveis_titulo"
        assert PROPERTY_COLUMNS[-1] == "_imoveis_bairro"
        assert PROPERTY_COLUMNS.index("_imoveis_desconto_percentual") + 1 == PROPERTY_COLUMNS.index("_imoveis_desconto_pct")
        assert len(set(PROPERTY_COLUMNS)) == len(PROPERTY_COLUMNS)


class TestCityModels:
    """Tests for city entries and the city index entry."""

    def test_city_entry_is_immutable(self):
        city = CityEntry(code="7171", name="PORTO VELHO")
        assert city == CityEntry("7171", "PORTO VELHO")
        assert hash(city) == hash(CityEntry("7171", "PORTO VELHO"))

    def test_city_urls_alias(self):
        entry = CityUrls(city_name="PORTO VELHO", urls=["u1"])
        assert entry.model_dump(by_alias=True) == {"cidade": "PORTO VELHO", "urls": ["u1"]}

    def test_city_urls_from_json_shape(self):
        entry = CityUrls.model_validate({"cidade": "ARIQUEMES", "urls": []})
        assert entry.city_name == "ARIQUEMES"
        assert entry.urls == []
