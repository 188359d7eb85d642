import json
import logging
import sqlite3
from typing import Optional

import pandas as pd

from conectDB.conexao import conectar

logger = logging.getLogger(__name__)

ACOES = ('create', 'update', 'delete', 'view', 'login', 'logout', 'upload', 'download', 'renegotiate', 'pay')
ENTIDADES = ('supplier', 'account_payable', 'account_receivable', 'supplier_invoice', 'attachment', 'employee', 'user', 'system')

ACOES_LABELS = {
    'create': 'Criação',
    'update': 'Atualização',
    'delete': 'Exclusão',
    'view': 'Visualização',
    'login': 'Login',
    'logout': 'Logout',
    'upload': 'Upload',
    'download': 'Download',
    'renegotiate': 'Renegociação',
    'pay': 'Pagamento',
}

ENTIDADES_LABELS = {
    'supplier': 'Fornecedor',
    'account_payable': 'Conta a Pagar',
    'account_receivable': 'Conta a Receber',
    'supplier_invoice': 'Nota Fiscal',
    'attachment': 'Anexo',
    'employee': 'Funcionário',
    'user': 'Usuário',
    'system': 'Sistema',
}


def registrar_log(acao: str, entidade: str, entidade_id=None, detalhes: Optional[dict] = None,
                  status: str = 'success', user_id: Optional[str] = None, user_name: Optional[str] = None) -> Optional[int]:
    """
    Grava uma entrada de auditoria. Os detalhes vão como JSON marcado com a ação
    ({"acao": ..., ...}). Uma falha ao gravar é registrada no log do processo e não interrompe a operação.
    """
    if acao not in ACOES:
        raise ValueError(f"Ação de log inválida: {acao!r}")
    if entidade not in ENTIDADES:
        raise ValueError(f"Tipo de entidade inválido: {entidade!r}")
    if status not in ('success', 'error'):
        raise ValueError(f"Status de log inválido: {status!r}")

    payload = json.dumps({'acao': acao, **(detalhes or {})}, ensure_ascii=False, default=str)

    conn = conectar()
    try:
        with conn:
            cur = conn.execute('''
                INSERT INTO system_logs (user_id, user_name, action, entity_type, entity_id, details, status)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (user_id, user_name or user_id or 'Desconhecido', acao, entidade,
                  str(entidade_id) if entidade_id is not None else None, payload, status))
            return cur.lastrowid
    except sqlite3.Error as e:
        logger.error("Falha ao registrar log (%s/%s): %s", acao, entidade, e)
        return None
    finally:
        conn.close()


def buscar_logs(entidade: Optional[str] = None, status: Optional[str] = None, limite: int = 100) -> pd.DataFrame:
    conn = conectar()
    try:
        query = "SELECT id, created_at, user_name, action, entity_type, entity_id, status, details FROM system_logs WHERE 1=1"
        params = []
        if entidade:
            query += " AND entity_type=?"
            params.append(entidade)
        if status:
            query += " AND status=?"
            params.append(status)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(int(limite))
        return pd.read_sql_query(query, conn, params=params)
    finally:
        conn.close()


def detalhes_do_log(texto: Optional[str]) -> dict:
    if not texto:
        return {}
    try:
        return json.loads(texto)
    except (TypeError, ValueError):
        return {'bruto': texto}
