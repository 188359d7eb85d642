# -*- coding: utf-8 -*-
"""Testes para o log de auditoria."""

import json

import pytest

from repositories import logs_rps as rps


class TestRegistrarLog:
    """Testes de registrar_log."""

    def test_detalhes_marcados_com_a_acao(self):
        log_id = rps.registrar_log("create", "supplier", 5, {"nome": "Alfa"}, user_id="ana", user_name="Ana")
        assert log_id is not None

        df = rps.buscar_logs()
        assert df.loc[0, "entity_id"] == "5"
        assert df.loc[0, "user_name"] == "Ana"
        assert json.loads(df.loc[0, "details"]) == {"acao": "create", "nome": "Alfa"}

    def test_usuario_desconhecido(self):
        rps.registrar_log("login", "user")
        assert rps.buscar_logs().loc[0, "user_name"] == "Desconhecido"

    @pytest.mark.parametrize("acao, entidade, status", [
        ("apagar", "supplier", "success"),
        ("create", "cliente", "success"),
        ("create", "supplier", "ok"),
    ])
    def test_valores_invalidos(self, acao, entidade, status):
        with pytest.raises(ValueError):
            rps.registrar_log(acao, entidade, status=status)


class TestBuscarLogs:
    """Testes de filtros da listagem."""

    def test_filtros_e_limite(self):
        rps.registrar_log("create", "supplier", 1)
        rps.registrar_log("update", "supplier", 1, status="error")
        rps.registrar_log("pay", "account_payable", 7)

        assert len(rps.buscar_logs()) == 3
        assert rps.buscar_logs(entidade="supplier")["action"].tolist() == ["update", "create"]
        assert rps.buscar_logs(status="error")["action"].tolist() == ["update"]
        assert len(rps.buscar_logs(limite=1)) == 1


class TestDetalhes:
    """Testes de detalhes_do_log."""

    def test_json_valido(self):
        assert rps.detalhes_do_log('{"acao": "pay"}') == {"acao": "pay"}

    def test_texto_vazio_ou_invalido(self):
        assert rps.detalhes_do_log(None) == {}
        assert rps.detalhes_do_log("texto solto") == {"bruto": "texto solto"}
