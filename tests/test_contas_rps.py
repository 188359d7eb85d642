# -*- coding: utf-8 -*-
"""Testes para contas a pagar e a receber."""

from datetime import date

import pytest

from conftest import HOJE
from repositories import contas_rps as rps
from repositories import notas_rps


class TestCadastro:
    """Testes de lançamento de contas."""

    def test_conta_pagar_parcelada(self, fornecedor):
        ids = rps.cadastrar_conta_pagar("Aluguel equipamento", fornecedor, 100, date(2026, 11, 10), 3,
                                        categoria="Aluguel", tags=["fixo", " "])
        assert len(ids) == 3

        df = rps.buscar_contas("pagar", hoje=HOJE)
        assert df["amount"].tolist() == [33.33, 33.33, 33.34]
        assert df["installment_number"].tolist() == [1, 2, 3]
        assert set(df["supplier_name"]) == {"Distribuidora Alfa"}
        assert df.loc[0, "tags"] == ["fixo"]
        assert not df["is_from_invoice"].any()

    def test_fornecedor_inexistente(self):
        with pytest.raises(ValueError, match="não encontrado"):
            rps.cadastrar_conta_pagar("Conta", 999, 10, date(2026, 11, 1))

    def test_descricao_obrigatoria(self, fornecedor):
        with pytest.raises(ValueError):
            rps.cadastrar_conta_pagar("  ", fornecedor, 10, date(2026, 11, 1))

    def test_conta_receber(self):
        ids = rps.cadastrar_conta_receber("Consultoria", "Cliente Beta", 250.5, "2026-11-05",
                                          documento_cliente="52998224725", recorrente=True,
                                          tipo_recorrencia="Mensal")
        conta = rps.buscar_detalhe_conta("receber", ids[0], hoje=HOJE)
        assert conta["customer_name"] == "Cliente Beta"
        assert conta["amount"] == 250.5
        assert conta["is_recurring"] is True
        assert conta["recurrence_type"] == "monthly"
        assert conta["status_efetivo"] == "a_vencer"

    def test_cliente_obrigatorio(self):
        with pytest.raises(ValueError):
            rps.cadastrar_conta_receber("Consultoria", "", 100, "2026-11-05")

    def test_tipo_invalido(self):
        with pytest.raises(ValueError):
            rps.buscar_contas("outro")

    def test_zero_parcelas(self, fornecedor):
        with pytest.raises(ValueError, match="pelo menos 1"):
            rps.cadastrar_conta_pagar("Conta", fornecedor, 100, date(2026, 11, 1), 0)
        with pytest.raises(ValueError, match="pelo menos 1"):
            rps.cadastrar_conta_receber("Consultoria", "Cliente Beta", 100, "2026-11-05", 0)
        assert rps.buscar_contas("pagar", hoje=HOJE).empty


class TestConsultas:
    """Testes de filtros e status efetivo."""

    def test_filtro_usa_status_efetivo(self, fornecedor):
        rps.cadastrar_conta_pagar("Vencida", fornecedor, 10, date(2026, 10, 1))
        rps.cadastrar_conta_pagar("Futura", fornecedor, 20, date(2026, 11, 1))

        vencidas = rps.buscar_contas("pagar", "vencida", hoje=HOJE)
        assert vencidas["description"].tolist() == ["Vencida"]
        # o status gravado continua a_vencer
        assert vencidas.loc[0, "status"] == "a_vencer"

    def test_detalhe_inexistente(self):
        assert rps.buscar_detalhe_conta("pagar", 123) is None

    def test_categorias(self, fornecedor):
        rps.cadastrar_conta_pagar("A", fornecedor, 10, date(2026, 11, 1), categoria="Luz")
        rps.cadastrar_conta_receber("B", "Cliente", 10, date(2026, 11, 1), categoria="Vendas")
        assert rps.buscar_categorias() == ["Luz", "Vendas"]
        assert rps.buscar_categorias("receber") == ["Vendas"]


class TestPagamento:
    """Testes de pagamento e estorno."""

    def test_valor_padrao_inclui_juros_e_multa(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Energia", fornecedor, 100, date(2026, 10, 1))[0]
        rps.registrar_pagamento("pagar", conta_id, juros=2.5, multa=2, data_pagamento=date(2026, 10, 5))

        conta = rps.buscar_detalhe_conta("pagar", conta_id, hoje=HOJE)
        assert conta["status"] == "paga"
        assert conta["status_efetivo"] == "paga"
        assert conta["paid_amount"] == 104.5
        assert conta["interest_amount"] == 2.5
        assert conta["payment_date"] == "2026-10-05"

    def test_valor_informado(self):
        conta_id = rps.cadastrar_conta_receber("Venda", "Cliente", 100, date(2026, 10, 1))[0]
        rps.registrar_pagamento("receber", conta_id, valor_pago=90)
        assert rps.buscar_detalhe_conta("receber", conta_id)["received_amount"] == 90.0

    def test_nao_paga_duas_vezes(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Energia", fornecedor, 100, date(2026, 10, 1))[0]
        rps.registrar_pagamento("pagar", conta_id)
        with pytest.raises(ValueError, match="Paga"):
            rps.registrar_pagamento("pagar", conta_id)

    def test_juros_negativos(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Energia", fornecedor, 100, date(2026, 10, 1))[0]
        with pytest.raises(ValueError):
            rps.registrar_pagamento("pagar", conta_id, juros=-1)

    def test_estorno(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Energia", fornecedor, 100, date(2026, 10, 1))[0]
        rps.registrar_pagamento("pagar", conta_id)
        rps.estornar_pagamento("pagar", conta_id)

        conta = rps.buscar_detalhe_conta("pagar", conta_id, hoje=HOJE)
        assert conta["status"] == "a_vencer"
        assert conta["status_efetivo"] == "vencida"
        assert conta["payment_date"] is None
        assert conta["paid_amount"] is None

    def test_estorno_de_conta_nao_paga(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Energia", fornecedor, 100, date(2026, 10, 1))[0]
        with pytest.raises(ValueError):
            rps.estornar_pagamento("pagar", conta_id)


class TestRenegociacao:
    """Testes de renegociar_conta."""

    def test_cria_conta_filha(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Fornecimento", fornecedor, 200, date(2026, 9, 10), categoria="Insumos")[0]
        novo_id = rps.renegociar_conta("pagar", conta_id, date(2026, 11, 10), juros=10, multa=4, usuario="ana")

        original = rps.buscar_detalhe_conta("pagar", conta_id, hoje=HOJE)
        nova = rps.buscar_detalhe_conta("pagar", novo_id, hoje=HOJE)
        assert original["status"] == "renegociada"
        assert original["renegotiated_by"] == "ana"
        assert nova["parent_id"] == conta_id
        assert nova["amount"] == 214.0
        assert nova["due_date"] == "2026-11-10"
        assert nova["original_due_date"] == "2026-09-10"
        assert nova["category"] == "Insumos"
        assert nova["status_efetivo"] == "a_vencer"

    def test_novo_valor(self):
        conta_id = rps.cadastrar_conta_receber("Mensalidade", "Cliente", 100, date(2026, 9, 10))[0]
        novo_id = rps.renegociar_conta("receber", conta_id, "2026-12-01", novo_valor=80)
        assert rps.buscar_detalhe_conta("receber", novo_id)["amount"] == 80.0

    def test_conta_paga_nao_renegocia(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Fornecimento", fornecedor, 200, date(2026, 9, 10))[0]
        rps.registrar_pagamento("pagar", conta_id)
        with pytest.raises(ValueError):
            rps.renegociar_conta("pagar", conta_id, date(2026, 11, 10))

    def test_data_obrigatoria(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Fornecimento", fornecedor, 200, date(2026, 9, 10))[0]
        with pytest.raises(ValueError):
            rps.renegociar_conta("pagar", conta_id, None)


class TestEdicao:
    """Testes de atualização e exclusão."""

    def test_atualiza_campos(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Internet", fornecedor, 100, date(2026, 11, 1))[0]
        rps.atualizar_conta("pagar", conta_id, description="Internet fibra", amount=120, tags=["ti"])
        conta = rps.buscar_detalhe_conta("pagar", conta_id)
        assert conta["description"] == "Internet fibra"
        assert conta["amount"] == 120.0
        assert conta["tags"] == ["ti"]

    def test_campo_nao_editavel(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Internet", fornecedor, 100, date(2026, 11, 1))[0]
        with pytest.raises(ValueError, match="não editáveis"):
            rps.atualizar_conta("pagar", conta_id, paid_amount=10)

    def test_status_invalido(self, fornecedor):
        conta_id = rps.cadastrar_conta_pagar("Internet", fornecedor, 100, date(2026, 11, 1))[0]
        with pytest.raises(ValueError):
            rps.atualizar_conta("pagar", conta_id, status="cancelada")

    def test_conta_inexistente(self):
        with pytest.raises(ValueError, match="não encontrada"):
            rps.atualizar_conta("receber", 999, description="X")

    def test_excluir(self):
        conta_id = rps.cadastrar_conta_receber("Venda", "Cliente", 100, date(2026, 11, 1))[0]
        rps.excluir_conta("receber", conta_id)
        assert rps.buscar_detalhe_conta("receber", conta_id) is None

    def test_conta_de_nota_fiscal_bloqueada(self, fornecedor):
        notas_rps.lancar_nota(fornecedor, "555", 100, date(2026, 11, 1))
        conta = rps.buscar_contas("pagar").iloc[0]
        assert bool(conta["is_from_invoice"]) is True

        with pytest.raises(ValueError, match="Nota Fiscal"):
            rps.atualizar_conta("pagar", int(conta["id"]), description="Outra")
        with pytest.raises(ValueError, match="Nota Fiscal"):
            rps.excluir_conta("pagar", int(conta["id"]))
