# -*- coding: utf-8 -*-
"""Fixtures compartilhadas: banco SQLite e armazenamento de arquivos temporários por teste."""

import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from conectDB import conexao
from services import storage_svc
import database as db

HOJE = date(2026, 10, 19)
CNPJ_VALIDO = "11444777000161"
CPF_VALIDO = "52998224725"
OUTRO_CPF_VALIDO = "11144477735"


@pytest.fixture(autouse=True)
def banco(tmp_path, monkeypatch):
    """Cada teste roda com um banco e uma pasta de anexos novos."""
    monkeypatch.delenv("INITIAL_ADMIN_USERNAME", raising=False)
    monkeypatch.delenv("INITIAL_ADMIN_PASSWORD", raising=False)
    monkeypatch.setattr(conexao, "DB_PATH", str(tmp_path / "teste.db"))
    monkeypatch.setattr(storage_svc, "STORAGE_DIR", str(tmp_path / "storage"))
    db.init_db()
    return tmp_path


@pytest.fixture
def fornecedor():
    """Fornecedor ativo com CNPJ válido."""
    from repositories import fornecedores_rps
    return fornecedores_rps.cadastrar_fornecedor("Distribuidora Alfa", CNPJ_VALIDO, categoria="Materiais")
