# -*- coding: utf-8 -*-
"""Testes para o agrupamento de parcelas de notas fiscais."""

import random

import pandas as pd

from services import notas_svc


def _parcela(numero_nota, valor, parcela=None, emissao="2026-10-01", descricao="Produto"):
    return {
        "invoice_number": numero_nota,
        "supplier_id": 1,
        "product_description": descricao,
        "issue_date": emissao,
        "amount": valor,
        "installment_number": parcela,
    }


class TestAgrupamento:
    """Testes de group_invoices_by_number."""

    def test_soma_e_ordena_parcelas(self):
        """Parcelas da mesma nota viram um grupo com total somado e ordem por número da parcela."""
        parcelas = [
            _parcela("100", 50.0, 2),
            _parcela("100", 50.0, 1),
            _parcela("100", 50.5, 3),
        ]
        grupos = notas_svc.group_invoices_by_number(parcelas)

        assert len(grupos) == 1
        assert grupos[0]["total_amount"] == 150.5
        assert [p["installment_number"] for p in grupos[0]["installments"]] == [1, 2, 3]
        assert grupos[0]["quantidade"] == 3
        assert grupos[0]["expansivel"] is True

    def test_nota_de_parcela_unica_nao_expande(self):
        grupos = notas_svc.group_invoices_by_number([_parcela("200", 80.0)])
        assert grupos[0]["expansivel"] is False
        assert grupos[0]["total_amount"] == 80.0

    def test_ordem_de_primeira_aparicao(self):
        """Os grupos saem na ordem em que cada número apareceu pela primeira vez."""
        parcelas = [_parcela("B", 10.0, 1), _parcela("A", 20.0, 1), _parcela("B", 10.0, 2)]
        grupos = notas_svc.group_invoices_by_number(parcelas)
        assert [g["invoice_number"] for g in grupos] == ["B", "A"]

    def test_dados_vem_da_primeira_parcela(self):
        parcelas = [_parcela("C", 10.0, 2, descricao="Primeira"), _parcela("C", 10.0, 1, descricao="Segunda")]
        grupo = notas_svc.group_invoices_by_number(parcelas)[0]
        assert grupo["product_description"] == "Primeira"

    def test_parcelas_sem_numero_vao_para_o_fim(self):
        parcelas = [_parcela("D", 1.0, None), _parcela("D", 1.0, 1)]
        grupo = notas_svc.group_invoices_by_number(parcelas)[0]
        assert grupo["installments"][0]["installment_number"] == 1

    def test_nenhuma_parcela_se_perde(self):
        """Toda parcela de entrada aparece em exatamente um grupo."""
        parcelas = [_parcela(str(i % 3), 1.0, i) for i in range(1, 8)]
        grupos = notas_svc.group_invoices_by_number(parcelas)
        assert sum(g["quantidade"] for g in grupos) == len(parcelas)
        assert sum(g["total_amount"] for g in grupos) == 7.0

    def test_total_nao_depende_da_ordem_de_entrada(self):
        """Embaralhar as parcelas não muda o total de cada nota."""
        parcelas = [_parcela(nota, valor, i) for i, (nota, valor) in enumerate(
            [("A", 10.1), ("B", 20.2), ("A", 30.3), ("C", 5.0), ("B", 0.7), ("A", 0.01)], start=1)]
        totais = {g["invoice_number"]: g["total_amount"] for g in notas_svc.group_invoices_by_number(parcelas)}

        sorteio = random.Random(42)
        for _ in range(10):
            embaralhadas = parcelas[:]
            sorteio.shuffle(embaralhadas)
            grupos = notas_svc.group_invoices_by_number(embaralhadas)
            assert {g["invoice_number"]: g["total_amount"] for g in grupos} == totais

    def test_aceita_dataframe_e_valor_nulo(self):
        df = pd.DataFrame([_parcela("E", 30.0, 1), _parcela("E", None, 2)])
        grupo = notas_svc.group_invoices_by_number(df)[0]
        assert grupo["total_amount"] == 30.0

    def test_lista_vazia(self):
        assert notas_svc.group_invoices_by_number([]) == []


class TestOrdenacao:
    """Testes de ordenar_grupos."""

    def test_emissao_mais_recente_primeiro(self):
        parcelas = [
            _parcela("1", 10.0, 1, emissao="2026-08-01"),
            _parcela("2", 10.0, 1, emissao="2026-10-01"),
            _parcela("3", 10.0, 1, emissao="2026-09-01"),
        ]
        grupos = notas_svc.ordenar_grupos(notas_svc.group_invoices_by_number(parcelas))
        assert [g["invoice_number"] for g in grupos] == ["2", "3", "1"]
