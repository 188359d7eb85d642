# -*- coding: utf-8 -*-
"""Testes para anexos de registros."""

import pytest

from conectDB.conexao import conectar
from repositories import anexos_rps as rps
from services import storage_svc as stg


class TestTiposRegistro:
    """Testes dos nomes aceitos para o tipo de registro."""

    def test_normaliza_nomes_antigos(self):
        assert rps.normalizar_tipo_registro("account_payable") == "payable"
        assert rps.normalizar_tipo_registro("accounts_receivable") == "receivable"
        assert rps.normalizar_tipo_registro("supplier") == "supplier"

    def test_aliases(self):
        assert set(rps.aliases_tipo_registro("payable")) == {"payable", "account_payable", "accounts_payable"}
        assert rps.aliases_tipo_registro("employee") == ["employee"]


class TestEnvio:
    """Testes de envio, listagem, download e exclusão."""

    def test_enviar_e_baixar(self):
        res = rps.enviar_anexo("account_payable", 10, "comprovante.png", b"imagem", "image/png", "ana")

        df = rps.buscar_anexos("payable", 10)
        assert df["file_name"].tolist() == ["comprovante.png"]
        assert df.loc[0, "record_type"] == "payable"
        assert df.loc[0, "file_size"] == 6
        assert stg.verificar_url_assinada(res["file_url"]) == res["storage_path"]

        nome, tipo, conteudo = rps.baixar_anexo(res["id"])
        assert (nome, tipo, conteudo) == ("comprovante.png", "image/png", b"imagem")

    def test_tipo_padrao_pdf(self):
        res = rps.enviar_anexo("receivable", 1, "nota.pdf", b"%PDF")
        assert rps.buscar_anexo(res["id"])["file_type"] == "application/pdf"

    def test_encontra_registros_com_nome_antigo(self):
        conn = conectar()
        try:
            with conn:
                conn.execute("""
                    INSERT INTO attachments (record_id, record_type, file_name, file_type, file_url)
                    VALUES (3, 'accounts_receivable', 'antigo.pdf', 'application/pdf', 'storage://attachments/3/x.pdf')
                """)
        finally:
            conn.close()
        assert rps.buscar_anexos("receivable", 3)["file_name"].tolist() == ["antigo.pdf"]

    def test_arquivo_vazio(self):
        with pytest.raises(ValueError):
            rps.enviar_anexo("payable", 1, "vazio.pdf", b"")

    def test_excluir_remove_arquivo(self):
        res = rps.enviar_anexo("payable", 2, "doc.pdf", b"conteudo")
        rps.excluir_anexo(res["id"])

        assert rps.buscar_anexo(res["id"]) is None
        with pytest.raises(FileNotFoundError):
            stg.ler_objeto(res["storage_path"])

    def test_excluir_inexistente(self):
        with pytest.raises(ValueError):
            rps.excluir_anexo(999)

    def test_link_adulterado(self):
        with pytest.raises(ValueError, match="expirado ou inválido"):
            rps.abrir_link("storage://attachments/1/x.pdf?expires=1&token=abc")
