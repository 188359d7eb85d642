import re
import sqlite3
from typing import Optional

import pandas as pd

from conectDB.conexao import conectar

TIPOS_ENTIDADE = ('supplier', 'payable', 'receivable', 'all')
COR_PADRAO = '#6b7280'
_COR_HEX = re.compile(r'^#[0-9a-fA-F]{6}$')


def buscar_tags(tipo_entidade: Optional[str] = None) -> pd.DataFrame:
    """Tags em ordem alfabética. Com tipo informado, inclui também as tags de uso geral ('all')."""
    conn = conectar()
    try:
        query = "SELECT id, name, color, entity_type FROM tags"
        params = []
        if tipo_entidade and tipo_entidade != 'all':
            query += " WHERE entity_type IN (?, 'all')"
            params.append(tipo_entidade)
        query += " ORDER BY name"
        return pd.read_sql_query(query, conn, params=params)
    finally:
        conn.close()


def criar_tag(nome: str, cor: str = COR_PADRAO, tipo_entidade: str = 'all') -> int:
    nome = (nome or '').strip()
    if not nome:
        raise ValueError("O nome da tag é obrigatório.")
    if tipo_entidade not in TIPOS_ENTIDADE:
        raise ValueError(f"Tipo de tag inválido: {tipo_entidade!r}")
    if not _COR_HEX.match(cor or ''):
        raise ValueError(f"Cor inválida: {cor!r} (use o formato #RRGGBB)")

    conn = conectar()
    try:
        with conn:
            cur = conn.execute("INSERT INTO tags (name, color, entity_type) VALUES (?, ?, ?)", (nome, cor, tipo_entidade))
            return cur.lastrowid
    except sqlite3.IntegrityError:
        raise ValueError(f"A tag '{nome}' já existe para este tipo.")
    finally:
        conn.close()


def excluir_tag(tag_id: int) -> None:
    conn = conectar()
    try:
        with conn:
            conn.execute("DELETE FROM tags WHERE id=?", (tag_id,))
    finally:
        conn.close()
