# -*- coding: utf-8 -*-
"""Testes para geração de parcelas e recorrência."""

from datetime import date

import pytest

from services import parcelas_svc as parc


class TestGerarParcelas:
    """Testes de gerar_parcelas."""

    def test_sobra_vai_para_ultima_parcela(self):
        parcelas = parc.gerar_parcelas(100, date(2026, 1, 10), 3)
        assert [p["amount"] for p in parcelas] == [33.33, 33.33, 33.34]
        assert sum(round(p["amount"] * 100) for p in parcelas) == 10000

    def test_numeracao(self):
        parcelas = parc.gerar_parcelas(90, "2026-01-10", 3)
        assert [(p["installment_number"], p["total_installments"]) for p in parcelas] == [(1, 3), (2, 3), (3, 3)]

    def test_vencimento_limitado_ao_fim_do_mes(self):
        """31/01 avança para 28/02 e volta a 31/03."""
        parcelas = parc.gerar_parcelas(300, date(2026, 1, 31), 3)
        assert [p["due_date"] for p in parcelas] == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31)]

    def test_parcela_unica(self):
        parcelas = parc.gerar_parcelas(59.9, date(2026, 5, 5))
        assert len(parcelas) == 1
        assert parcelas[0]["amount"] == 59.9

    def test_sem_quantidade_informada_vira_parcela_unica(self):
        parcelas = parc.gerar_parcelas(80, date(2026, 5, 5), None)
        assert [p["total_installments"] for p in parcelas] == [1]

    def test_zero_parcelas_e_recusado(self):
        """Zero parcelas não vira parcela única."""
        with pytest.raises(ValueError, match="pelo menos 1"):
            parc.gerar_parcelas(100, date(2026, 1, 1), 0)

    @pytest.mark.parametrize("valor, data, total", [
        (100, date(2026, 1, 1), 0),
        (0, date(2026, 1, 1), 1),
        (100, "data-ruim", 1),
        (0.02, date(2026, 1, 1), 3),
    ])
    def test_entradas_invalidas(self, valor, data, total):
        with pytest.raises(ValueError):
            parc.gerar_parcelas(valor, data, total)


class TestMeses:
    """Testes de somar_meses."""

    def test_ano_bissexto(self):
        assert parc.somar_meses(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_virada_de_ano(self):
        assert parc.somar_meses(date(2026, 11, 15), 3) == date(2027, 2, 15)

    def test_meses_negativos(self):
        assert parc.somar_meses(date(2026, 1, 1), -1) == date(2025, 12, 1)


class TestRecorrencia:
    """Testes de normalizar_recorrencia."""

    def test_nomes_em_portugues_e_ingles(self):
        assert parc.normalizar_recorrencia("Mensal") == "monthly"
        assert parc.normalizar_recorrencia("weekly") == "weekly"
        assert parc.normalizar_recorrencia(None) is None

    def test_tipo_invalido(self):
        with pytest.raises(ValueError):
            parc.normalizar_recorrencia("quinzenal")
