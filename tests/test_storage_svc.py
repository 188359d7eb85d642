# -*- coding: utf-8 -*-
"""Testes para o armazenamento local e URLs assinadas."""

import logging

import pytest

from services import storage_svc as stg


class TestCaminhos:
    """Testes de nomes e caminhos de objetos."""

    def test_sanitizar_nome(self):
        assert stg.sanitizar_nome("nota fiscal (1).PDF") == "nota_fiscal__1_.PDF"

    def test_montar_caminho_extensao_minuscula(self):
        caminho = stg.montar_caminho(42, "Boleto.PDF")
        assert caminho.startswith("42/")
        assert caminho.endswith(".pdf")

    def test_montar_caminho_sem_extensao(self):
        assert stg.montar_caminho(7, "arquivo").endswith(".pdf")

    def test_caminhos_unicos(self):
        assert stg.montar_caminho(1, "a.png") != stg.montar_caminho(1, "a.png")


class TestObjetos:
    """Testes de gravação, leitura e remoção."""

    def test_salvar_ler_remover(self):
        stg.salvar_objeto("1/teste.txt", b"conteudo")
        assert stg.ler_objeto("1/teste.txt") == b"conteudo"
        assert stg.remover_objeto("1/teste.txt") is True
        assert stg.remover_objeto("1/teste.txt") is False

    def test_nao_sobrescreve(self):
        stg.salvar_objeto("1/dup.txt", b"a")
        with pytest.raises(FileExistsError):
            stg.salvar_objeto("1/dup.txt", b"b")

    def test_bloqueia_caminho_fora_do_bucket(self):
        with pytest.raises(ValueError):
            stg.salvar_objeto("../../fora.txt", b"x")


class TestUrlsAssinadas:
    """Testes de geração e verificação de URLs com validade."""

    def test_url_valida(self):
        url = stg.gerar_url_assinada("5/doc.pdf", 60, agora=1000)
        assert url.startswith("storage://attachments/5/doc.pdf?")
        assert stg.verificar_url_assinada(url, agora=1030) == "5/doc.pdf"

    def test_url_expirada(self):
        url = stg.gerar_url_assinada("5/doc.pdf", 60, agora=1000)
        assert stg.verificar_url_assinada(url, agora=1061) is None

    def test_token_adulterado(self):
        url = stg.gerar_url_assinada("5/doc.pdf", 60, agora=1000)
        adulterada = url.replace("5/doc.pdf", "6/doc.pdf")
        assert stg.verificar_url_assinada(adulterada, agora=1010) is None

    def test_url_de_outro_formato(self):
        assert stg.verificar_url_assinada("https://exemplo.com/doc.pdf") is None
        assert stg.caminho_da_url(None) is None

    def test_caminho_da_url_ignora_validade(self):
        url = stg.gerar_url_assinada("9/x.png", 1, agora=0)
        assert stg.caminho_da_url(url) == "9/x.png"


class TestSegredo:
    """Testes da leitura do segredo de assinatura."""

    def test_segredo_do_ambiente(self, monkeypatch, caplog):
        monkeypatch.setenv("GESTAO_STORAGE_SECRET", "segredo-da-empresa")
        with caplog.at_level(logging.WARNING, logger=stg.logger.name):
            assert stg.ler_segredo() == "segredo-da-empresa"
        assert not caplog.records

    def test_sem_segredo_usa_padrao_e_avisa(self, monkeypatch, caplog):
        """Sem a variável, o segredo padrão é usado e fica um aviso no log."""
        monkeypatch.delenv("GESTAO_STORAGE_SECRET", raising=False)
        with caplog.at_level(logging.WARNING, logger=stg.logger.name):
            assert stg.ler_segredo() == stg.SEGREDO_PADRAO
        assert any("GESTAO_STORAGE_SECRET" in r.getMessage() for r in caplog.records)
