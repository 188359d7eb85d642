# -*- coding: utf-8 -*-
"""Testes para usuários, papéis e credenciais."""

import pytest

import database as db
from repositories import admin_usuarios_rps as rps


class TestCriarUsuario:
    """Testes de criar_usuario."""

    def test_cria_e_autentica(self):
        rps.criar_usuario("ana", "segredo123", "Ana Lima", "financeiro", "ana@empresa.com")

        assert rps.verifica_usuario_existe("ana")
        assert db.verificar_credenciais("ana", "segredo123") == (True, "Ana Lima", "financeiro")
        assert db.verificar_credenciais("ana", "errada") == (False, None, None)
        assert rps.buscar_papel("ana") == "financeiro"

    def test_papel_padrao_visualizacao(self):
        rps.criar_usuario("leitor", "segredo123", "Leitor")
        assert rps.buscar_papel("leitor") == "visualizacao"

    def test_usuario_duplicado(self):
        rps.criar_usuario("ana", "segredo123", "Ana")
        with pytest.raises(ValueError, match="já existe"):
            rps.criar_usuario("ana", "outra123", "Ana 2")

    @pytest.mark.parametrize("username, senha, nome, papel", [
        ("", "segredo123", "Nome", "admin"),
        ("bob", "123", "Bob", "admin"),
        ("bob", "segredo123", "", "admin"),
        ("bob", "segredo123", "Bob", "gerente"),
    ])
    def test_dados_invalidos(self, username, senha, nome, papel):
        with pytest.raises(ValueError):
            rps.criar_usuario(username, senha, nome, papel)

    def test_lista_de_usuarios(self):
        rps.criar_usuario("ana", "segredo123", "Ana")
        df = db.buscar_lista_usuarios()
        assert df.columns.tolist() == ["username", "nome_completo", "email", "papel", "ativo"]
        assert df["username"].tolist() == ["ana"]


class TestAtualizarUsuario:
    """Testes de atualizar_usuario."""

    def test_nao_remove_ultimo_admin(self):
        rps.criar_usuario("root", "segredo123", "Admin", "admin")
        with pytest.raises(ValueError, match="administrador"):
            rps.atualizar_usuario("root", "Admin", "financeiro", True)
        with pytest.raises(ValueError, match="administrador"):
            rps.atualizar_usuario("root", "Admin", "admin", False)

    def test_rebaixa_admin_quando_ha_outro(self):
        rps.criar_usuario("root", "segredo123", "Admin", "admin")
        rps.criar_usuario("root2", "segredo123", "Admin 2", "admin")
        rps.atualizar_usuario("root", "Admin", "visualizacao", True)
        assert rps.buscar_papel("root") == "visualizacao"

    def test_troca_senha(self):
        rps.criar_usuario("ana", "segredo123", "Ana")
        rps.atualizar_usuario("ana", "Ana Lima", "visualizacao", True, nova_senha="nova-senha")
        assert db.verificar_credenciais("ana", "nova-senha") == (True, "Ana Lima", "visualizacao")
        assert db.verificar_credenciais("ana", "segredo123")[0] is False

    def test_usuario_inativo_nao_entra(self):
        rps.criar_usuario("ana", "segredo123", "Ana")
        rps.atualizar_usuario("ana", "Ana", "visualizacao", False)
        assert db.verificar_credenciais("ana", "segredo123")[0] is False
        assert rps.buscar_papel("ana") is None

    def test_inexistente(self):
        with pytest.raises(ValueError, match="não encontrado"):
            rps.atualizar_usuario("fantasma", "X", "admin", True)


class TestAdminInicial:
    """Testes de garantir_admin_inicial."""

    def test_cria_a_partir_do_ambiente(self, monkeypatch):
        monkeypatch.setenv("INITIAL_ADMIN_USERNAME", "admin")
        monkeypatch.setenv("INITIAL_ADMIN_PASSWORD", "senha-forte")

        assert db.garantir_admin_inicial() is True
        assert db.verificar_credenciais("admin", "senha-forte")[2] == "admin"
        # já existe usuário: não cria de novo
        assert db.garantir_admin_inicial() is False

    def test_sem_variaveis(self):
        assert db.garantir_admin_inicial() is False
