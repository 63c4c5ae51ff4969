"""Shared fixtures: a fast config and an in-process stand-in for a Playwright page."""

import pytest

from caixa_imoveis.config import Config, Delays


DETAIL_URL = "https://venda-imoveis.caixa.gov.br/sistema/detalhe-imovel.asp?hdnimovel=1444419970935"

DETAIL_HTML = """
<html><body>
<input type="hidden" id="hdnimovel" value="1444419970935">
<input type="hidden" id="hdn_estado" value="RO">
<input type="hidden" id="hdn_cidade" value="7171">
<input type="hidden" id="hdn_bairro" value="">
<div id="dadosImovel">
  <h5>PORTO VELHO - RESIDENCIAL JARDIM <span class="badge">Novo</span></h5>
  <div class="content">
    <p>Valor de avaliação: R$ 100.000,00<br>
       Valor mínimo de venda 1º Leilão: R$ 90.000,00<br>
       Valor mínimo de venda 2º Leilão: R$ 80.000,00<br>
       Valor mínimo de venda: R$ 10.000,00</p>
    <div class="control-item control-span-6_12">
      <span>Tipo de imóvel: <strong>Casa</strong></span>
      <span>Quartos: <strong>2</strong></span>
      <span>Garagem: <strong>1</strong></span>
      <span>Número do imóvel: <strong>1444419970935</strong></span>
      <span>Matrícula(s): <strong>12345</strong></span>
      <span>Comarca: <strong>PORTO VELHO-RO</strong></span>
      <span>Ofício: <strong>01</strong></span>
      <span>Inscrição imobiliária: <strong>03.01.001</strong></span>
      <span>Averbação dos leilões negativos: <strong>Averbado</strong></span>
    </div>
    <div class="control-item control-span-6_12">
      <span>Área total = <strong>*120,50m2</strong></span>
      <span>Área privativa = <strong>80,00m2</strong></span>
      <span>Área do terreno: <strong>200,00m2</strong></span>
    </div>
  </div>
</div>
<div class="related-box">
  <div id="divContador">
    <div class="control-span-12_12"><span><b>Leilão SFI - Edital Único</b></span></div>
  </div>
  <span>Edital: 0001/2025 CPA/RE</span>
  <span>Leiloeiro(a): FULANO DE TAL</span>
  <span>Número do item: 7</span>
  <span>Data do 1º Leilão - 10/03/2025 - 10h00</span>
  <span>Data do 2º Leilão - 24/03/2025 - 10h00</span>
  <p>Endereço: Rua A, Nº 123, Bairro B, CEP: 12345-000, Cidade C - RO</p>
  <p>Descrição: Casa com 2 quartos,
     sala e cozinha.</p>
  <p>FORMAS DE PAGAMENTO ACEITAS: Recursos próprios.</p>
  <a href="#" onclick="ExibeDoc('/editais/matricula/RO/12345.pdf')">Baixar matrícula</a>
</div>
<a href="#" onclick="ExibeDoc('/editais/EL0001.PDF')">Baixar edital e anexos</a>
<div id="galeria-imagens">
  <div class="thumbnails">
    <img src="/fotos/F1.jpg">
    <img data-src="/fotos/F2.jpg">
    <img data-original="https://cdn.example.com/F3.jpg">
    <img>
  </div>
</div>
</body></html>
"""


def listing_page_html(*listing_ids: str, broken: int = 0) -> str:
    """Result page with one item per id, plus `broken` items without an id."""
    items = "".join(
        f'<li class="group-block-item"><a href="#" onclick="detalhe_imovel({listing_id})">Ver</a></li>'
        for listing_id in listing_ids
    )
    items += '<li class="group-block-item"><a href="#" onclick="detalhe_imovel()">Ver</a></li>' * broken
    return f'<html><body><ul id="listaimoveispaginacao">{items}</ul></body></html>'


class FakeElement:
    def __init__(self, on_click=None):
        self.clicks = 0
        self._on_click = on_click

    async def click(self):
        self.clicks += 1
        if self._on_click:
            self._on_click()


class FakePage:
    """Minimal async page double.

    Scripted behaviour is injected through plain attributes and callables so
    each test controls only what it needs.
    """

    def __init__(self):
        self.url = ""
        self.html = ""
        self.elements: dict[str, FakeElement] = {}
        self.evaluate_handler = lambda expression, arg: None
        self.wait_function_handler = lambda expression, arg, timeout: True
        self.goto_handler = None
        self.calls: list[tuple] = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url))
        if self.goto_handler:
            self.goto_handler(url)
        self.url = url

    async def query_selector(self, selector):
        return self.elements.get(selector)

    async def wait_for_selector(self, selector, timeout=None):
        self.calls.append(("wait_for_selector", selector))
        return FakeElement()

    async def select_option(self, selector, value):
        self.calls.append(("select_option", selector, value))

    async def evaluate(self, expression, arg=None):
        self.calls.append(("evaluate", arg))
        return self.evaluate_handler(expression, arg)

    async def wait_for_function(self, expression, arg=None, timeout=None):
        self.calls.append(("wait_for_function", arg, timeout))
        return self.wait_function_handler(expression, arg, timeout)

    async def content(self):
        return self.html


@pytest.fixture
def fast_config(tmp_path):
    """Config with no pauses, writing into a temp dir."""
    return Config(
        output_dir=tmp_path,
        request_delay_seconds=0,
        delays=Delays(
            after_overlay_click=0,
            after_state_select=0,
            after_state_reselect=0,
            after_city_select=0,
            pagination_fallback=0,
        ),
    )


@pytest.fixture
def fake_page():
    return FakePage()
