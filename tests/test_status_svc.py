# -*- coding: utf-8 -*-
"""Testes para o cálculo do status efetivo das contas."""

from datetime import date

import pandas as pd

from services import status_svc as sts

HOJE = date(2026, 10, 19)


class TestStatusEfetivo:
    """Testes de calculate_effective_status."""

    def test_status_finais_nao_mudam(self):
        """Paga e renegociada valem mesmo com vencimento passado."""
        assert sts.calculate_effective_status("paga", "2020-01-01", HOJE) == "paga"
        assert sts.calculate_effective_status("renegociada", "2020-01-01", HOJE) == "renegociada"

    def test_a_vencer_passado_vira_vencida(self):
        assert sts.calculate_effective_status("a_vencer", "2026-10-18", HOJE) == "vencida"

    def test_vencimento_hoje_ainda_a_vencer(self):
        assert sts.calculate_effective_status("a_vencer", "2026-10-19", HOJE) == "a_vencer"

    def test_vencida_gravada_com_data_futura(self):
        """O status gravado 'vencida' é recalculado pela data."""
        assert sts.calculate_effective_status("vencida", "2026-12-01", HOJE) == "a_vencer"

    def test_sem_vencimento(self):
        assert sts.calculate_effective_status("a_vencer", None, HOJE) == "a_vencer"

    def test_label_status(self):
        assert sts.label_status("a_vencer") == "A Vencer"
        assert sts.label_status("desconhecido") == "desconhecido"


class TestAplicarStatusEfetivo:
    """Testes da coluna status_efetivo em DataFrames."""

    def test_adiciona_coluna(self):
        df = pd.DataFrame({
            "status": ["a_vencer", "a_vencer", "paga"],
            "due_date": ["2026-10-01", "2026-11-01", "2026-10-01"],
        })
        resultado = sts.aplicar_status_efetivo(df, HOJE)
        assert resultado["status_efetivo"].tolist() == ["vencida", "a_vencer", "paga"]

    def test_dataframe_vazio(self):
        df = pd.DataFrame(columns=["status", "due_date"])
        resultado = sts.aplicar_status_efetivo(df, HOJE)
        assert "status_efetivo" in resultado.columns
        assert resultado.empty
