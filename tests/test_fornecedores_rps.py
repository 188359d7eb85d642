# -*- coding: utf-8 -*-
"""Testes para o cadastro de fornecedores e o boleto padrão."""

from datetime import date

import pytest

from conftest import CNPJ_VALIDO, CPF_VALIDO
from repositories import anexos_rps
from repositories import contas_rps
from repositories import fornecedores_rps as rps


class TestCadastro:
    """Testes de cadastrar_fornecedor."""

    def test_documento_sem_mascara_e_tipo_inferido(self):
        forn_id = rps.cadastrar_fornecedor("Gráfica Beta", "11.444.777/0001-61", telefone="(11) 98765-4321",
                                           email="contato@grafica.com", uf="sp", tags=["gráfica"])
        forn = rps.buscar_detalhe_fornecedor(forn_id)
        assert forn["document"] == CNPJ_VALIDO
        assert forn["document_type"] == "cnpj"
        assert forn["phone"] == "11987654321"
        assert forn["state"] == "SP"
        assert forn["tags"] == ["gráfica"]
        assert forn["is_active"] == 1

    def test_pessoa_fisica(self):
        forn_id = rps.cadastrar_fornecedor("João Autônomo", CPF_VALIDO)
        assert rps.buscar_detalhe_fornecedor(forn_id)["document_type"] == "cpf"

    def test_documento_invalido(self):
        with pytest.raises(ValueError, match="CNPJ inválido"):
            rps.cadastrar_fornecedor("Empresa", "11444777000162")

    def test_email_invalido(self):
        with pytest.raises(ValueError, match="E-mail"):
            rps.cadastrar_fornecedor("Empresa", email="sem-arroba")

    def test_nome_obrigatorio(self):
        with pytest.raises(ValueError):
            rps.cadastrar_fornecedor("")


class TestConsulta:
    """Testes de buscar_fornecedores."""

    def test_busca_por_nome_e_documento(self, fornecedor):
        rps.cadastrar_fornecedor("Outro Fornecedor")
        assert rps.buscar_fornecedores(busca="alfa")["id"].tolist() == [fornecedor]
        assert rps.buscar_fornecedores(busca="11.444.777")["id"].tolist() == [fornecedor]

    def test_apenas_ativos(self, fornecedor):
        rps.cadastrar_fornecedor("Inativo", ativo=False)
        assert len(rps.buscar_fornecedores()) == 2
        assert rps.buscar_fornecedores(apenas_ativos=True)["id"].tolist() == [fornecedor]


class TestEdicao:
    """Testes de atualização e exclusão."""

    def test_atualizar(self, fornecedor):
        rps.atualizar_fornecedor(fornecedor, name="Alfa Ltda", phone="(11) 3333-4444", is_active=False)
        forn = rps.buscar_detalhe_fornecedor(fornecedor)
        assert forn["name"] == "Alfa Ltda"
        assert forn["phone"] == "1133334444"
        assert forn["is_active"] == 0

    def test_atualizar_documento_invalido(self, fornecedor):
        with pytest.raises(ValueError):
            rps.atualizar_fornecedor(fornecedor, document="123")

    def test_campo_nao_editavel(self, fornecedor):
        with pytest.raises(ValueError):
            rps.atualizar_fornecedor(fornecedor, created_at="2020-01-01")

    def test_inexistente(self):
        with pytest.raises(ValueError, match="não encontrado"):
            rps.atualizar_fornecedor(999, name="X")

    def test_excluir(self):
        forn_id = rps.cadastrar_fornecedor("Temporário")
        rps.excluir_fornecedor(forn_id)
        assert rps.buscar_detalhe_fornecedor(forn_id) is None

    def test_excluir_com_contas_bloqueado(self, fornecedor):
        contas_rps.cadastrar_conta_pagar("Compra", fornecedor, 10, date(2026, 11, 1))
        with pytest.raises(ValueError, match="vinculadas"):
            rps.excluir_fornecedor(fornecedor)


class TestBoletoPadrao:
    """Testes do boleto padrão do fornecedor."""

    def test_definir_e_baixar(self, fornecedor):
        url = rps.definir_boleto_padrao(fornecedor, "boleto.pdf", b"%PDF-boleto", enviado_por="ana")

        assert rps.buscar_detalhe_fornecedor(fornecedor)["default_boleto_url"] == url
        assert rps.baixar_boleto_padrao(fornecedor) == b"%PDF-boleto"
        anexos = anexos_rps.buscar_anexos("supplier", fornecedor)
        assert anexos["file_name"].tolist() == ["boleto.pdf"]

    def test_sem_boleto(self, fornecedor):
        assert rps.baixar_boleto_padrao(fornecedor) is None

    def test_fornecedor_inexistente(self):
        with pytest.raises(ValueError):
            rps.definir_boleto_padrao(999, "boleto.pdf", b"x")
