import pytest

from fiscal_checker.domain.cfop import CFOP_NOT_FOUND, CfopCatalog


def test_known_codes_have_descriptions():
    catalog = CfopCatalog()
    assert catalog.describe(5102) == "Venda de mercadoria adquirida ou recebida de terceiros"
    assert catalog.describe(1202) == "Devolução de venda de mercadoria adquirida ou recebida de terceiros"


def test_interstate_codes_share_descriptions():
    catalog = CfopCatalog()
    assert catalog.describe(2102) == catalog.describe(1102)
    assert catalog.describe(6102) == catalog.describe(5102)


def test_unknown_code_returns_sentinel():
    catalog = CfopCatalog()
    assert catalog.describe(9999) == CFOP_NOT_FOUND
    assert catalog.describe(None) == CFOP_NOT_FOUND


@pytest.mark.parametrize("raw", ["1202", " 1202 ", "1202.0", 1202])
def test_raw_values_are_parsed(raw):
    assert CfopCatalog().describe_raw(raw) == CfopCatalog().describe(1202)


@pytest.mark.parametrize("raw", ["abc", "", None, "12.02.3"])
def test_non_numeric_raw_values_return_sentinel(raw):
    assert CfopCatalog().describe_raw(raw) == CFOP_NOT_FOUND


def test_custom_table():
    catalog = CfopCatalog({1000: "Teste"})
    assert catalog.describe(1000) == "Teste"
    assert 1000 in catalog
    assert len(catalog) == 1
