# -*- coding: utf-8 -*-
"""Testes para os indicadores do painel."""

from datetime import date

import pytest

from conftest import HOJE
from repositories import contas_rps
from repositories import dashboard_rps as rps


@pytest.fixture
def cenario(fornecedor):
    """Contas espalhadas entre setembro e outubro de 2026 (hoje = 19/10/2026)."""
    contas_rps.cadastrar_conta_pagar("Aluguel atrasado", fornecedor, 100, date(2026, 10, 1))
    contas_rps.cadastrar_conta_pagar("Internet", fornecedor, 200, date(2026, 10, 22))
    contas_rps.cadastrar_conta_pagar("Seguro", fornecedor, 700, date(2026, 12, 1))
    pago = contas_rps.cadastrar_conta_pagar("Energia", fornecedor, 50, date(2026, 10, 5))[0]
    contas_rps.registrar_pagamento("pagar", pago, valor_pago=55, data_pagamento=date(2026, 10, 10))

    contas_rps.cadastrar_conta_receber("Projeto", "Cliente A", 300, date(2026, 10, 2))
    set_id = contas_rps.cadastrar_conta_receber("Consultoria", "Cliente B", 400, date(2026, 9, 15))[0]
    contas_rps.registrar_pagamento("receber", set_id, data_pagamento=date(2026, 9, 20))
    out_id = contas_rps.cadastrar_conta_receber("Treinamento", "Cliente C", 500, date(2026, 10, 10))[0]
    contas_rps.registrar_pagamento("receber", out_id, data_pagamento=date(2026, 10, 12))


class TestResumo:
    """Testes de buscar_resumo."""

    def test_indicadores(self, cenario):
        resumo = rps.buscar_resumo(HOJE)
        assert resumo["total_pagar"] == pytest.approx(1000.0)
        assert resumo["qtd_pagar"] == 3
        assert resumo["total_receber"] == pytest.approx(300.0)
        assert resumo["qtd_receber"] == 1
        assert resumo["total_vencido"] == pytest.approx(400.0)
        assert resumo["qtd_vencido"] == 2
        assert resumo["receita_mes"] == pytest.approx(500.0)
        assert resumo["despesa_mes"] == pytest.approx(55.0)

    def test_variacao_mensal(self, cenario):
        resumo = rps.buscar_resumo(HOJE)
        assert resumo["variacao_receita"] == 25.0
        # sem despesa paga no mês anterior
        assert resumo["variacao_despesa"] == 0.0

    def test_banco_vazio(self):
        resumo = rps.buscar_resumo(HOJE)
        assert resumo["total_pagar"] == 0
        assert resumo["qtd_vencido"] == 0


class TestGraficoMensal:
    """Testes de buscar_grafico_mensal."""

    def test_seis_meses_do_mais_antigo_ao_atual(self, cenario):
        df = rps.buscar_grafico_mensal(HOJE)
        assert df["mes"].tolist() == ["Mai/26", "Jun/26", "Jul/26", "Ago/26", "Set/26", "Out/26"]
        assert df.iloc[-1]["receitas"] == pytest.approx(500.0)
        assert df.iloc[-1]["despesas"] == pytest.approx(55.0)
        assert df.iloc[-2]["receitas"] == pytest.approx(400.0)
        assert df.iloc[0]["receitas"] == 0

    def test_virada_de_ano(self):
        df = rps.buscar_grafico_mensal(date(2026, 2, 10), meses=3)
        assert df["mes"].tolist() == ["Dez/25", "Jan/26", "Fev/26"]


class TestAlertas:
    """Testes de buscar_alertas."""

    def test_ordem_e_tipos(self, cenario):
        alertas = rps.buscar_alertas(HOJE)
        assert [(a["tipo"], a["titulo"]) for a in alertas] == [
            ("danger", "Conta Vencida"),
            ("warning", "Vencimento Próximo"),
            ("warning", "Recebimento Atrasado"),
        ]
        assert alertas[1]["descricao"] == "Internet"
        assert alertas[2]["descricao"] == "Projeto - Cliente A"

    def test_limite(self, fornecedor):
        for i in range(7):
            contas_rps.cadastrar_conta_pagar(f"Vencida {i}", fornecedor, 10, date(2026, 9, 1 + i))
        alertas = rps.buscar_alertas(HOJE, limite=8)
        # no máximo 5 contas vencidas
        assert len(alertas) == 5


class TestProximasContas:
    """Testes de buscar_proximas_contas."""

    def test_somente_pendentes_por_vencimento(self, cenario):
        df = rps.buscar_proximas_contas("pagar", HOJE)
        assert df["description"].tolist() == ["Aluguel atrasado", "Internet", "Seguro"]
        assert "supplier_name" in df.columns

    def test_receber(self, cenario):
        df = rps.buscar_proximas_contas("receber", HOJE)
        assert df["customer_name"].tolist() == ["Cliente A"]
        assert df.loc[0, "status_efetivo"] == "vencida"
