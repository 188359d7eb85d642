"""
Notas fiscais de fornecedor.

Cada parcela da nota gera uma linha em supplier_invoices e uma conta a pagar
vinculada (account_payable_id). Edição e exclusão da nota propagam para a conta.
"""

import logging
from datetime import date
from typing import List, Optional

import pandas as pd

from conectDB.conexao import conectar
import database as db
from services import notas_svc
from services import parcelas_svc as parc
from services import status_svc as sts

logger = logging.getLogger(__name__)

CATEGORIA_NOTA = 'Produtos/Mercadorias'
_CAMPOS_EDITAVEIS = ('invoice_number', 'product_description', 'issue_date', 'due_date', 'amount', 'notes', 'supplier_id')


def _descricao_conta(numero_nota: str, parcela: Optional[int], total: Optional[int], nome_fornecedor: Optional[str]) -> str:
    sufixo = f" ({parcela}/{total})" if parcela else ""
    return f"NF {numero_nota}{sufixo} - {nome_fornecedor or 'Fornecedor'}"


def _nome_fornecedor(conn, fornecedor_id: int) -> Optional[str]:
    row = conn.execute("SELECT name FROM suppliers WHERE id=?", (fornecedor_id,)).fetchone()
    return row['name'] if row else None


def lancar_nota(fornecedor_id: int, numero_nota: str, valor_total: float, primeiro_vencimento,
                total_parcelas: int = 1, descricao_produto: Optional[str] = None, data_emissao=None,
                observacoes: Optional[str] = None, criado_por: Optional[str] = None) -> List[int]:
    """
    Lança a nota e gera as contas a pagar de cada parcela em transação única.
    Retorna os ids das parcelas (supplier_invoices) na ordem.
    """
    numero_nota = (numero_nota or '').strip()
    if not numero_nota:
        raise ValueError("O número da nota é obrigatório.")
    parcelas = parc.gerar_parcelas(valor_total, primeiro_vencimento, total_parcelas)
    emissao = db._to_iso(data_emissao) or date.today().isoformat()

    conn = conectar()
    try:
        nome = _nome_fornecedor(conn, fornecedor_id)
        if nome is None:
            raise ValueError(f"Fornecedor {fornecedor_id} não encontrado.")
        duplicada = conn.execute(
            "SELECT 1 FROM supplier_invoices WHERE supplier_id=? AND invoice_number=?", (fornecedor_id, numero_nota)
        ).fetchone()
        if duplicada:
            raise ValueError(f"A nota {numero_nota} já foi lançada para este fornecedor.")

        ids = []
        with conn:
            for p in parcelas:
                valor_c = db.to_cents(p['amount'])
                cur = conn.execute('''
                    INSERT INTO accounts_payable (supplier_id, description, amount, due_date, status, category,
                                                  installment_number, total_installments, created_by)
                    VALUES (?, ?, ?, ?, 'a_vencer', ?, ?, ?, ?)
                ''', (fornecedor_id,
                      _descricao_conta(numero_nota, p['installment_number'], p['total_installments'], nome),
                      valor_c, p['due_date'], CATEGORIA_NOTA, p['installment_number'], p['total_installments'],
                      criado_por))
                conta_id = cur.lastrowid

                cur = conn.execute('''
                    INSERT INTO supplier_invoices (supplier_id, invoice_number, product_description, issue_date,
                                                   due_date, amount, account_payable_id, notes)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ''', (fornecedor_id, numero_nota, descricao_produto, emissao, p['due_date'], valor_c, conta_id, observacoes))
                ids.append(cur.lastrowid)
        logger.info("NF %s lançada para o fornecedor %s em %d parcela(s)", numero_nota, fornecedor_id, len(ids))
        return ids
    finally:
        conn.close()


def atualizar_nota(nota_id: int, **alteracoes) -> None:
    """Atualiza a parcela da nota e sincroniza valor, vencimento, descrição e fornecedor da conta vinculada."""
    invalidos = set(alteracoes) - set(_CAMPOS_EDITAVEIS)
    if invalidos:
        raise ValueError(f"Campos não editáveis: {', '.join(sorted(invalidos))}")

    if 'amount' in alteracoes:
        db._ensure_positive_number("Valor", alteracoes['amount'])
        alteracoes['amount'] = db.to_cents(alteracoes['amount'])
    for campo in ('issue_date', 'due_date'):
        if campo in alteracoes:
            alteracoes[campo] = db._to_iso(alteracoes[campo])
            if alteracoes[campo] is None:
                raise ValueError("Datas da nota não podem ficar vazias.")
    if 'invoice_number' in alteracoes:
        alteracoes['invoice_number'] = (alteracoes['invoice_number'] or '').strip()
        if not alteracoes['invoice_number']:
            raise ValueError("O número da nota é obrigatório.")

    conn = conectar()
    try:
        with conn:
            if alteracoes:
                colunas = ", ".join(f"{c}=?" for c in alteracoes)
                conn.execute(f"UPDATE supplier_invoices SET {colunas} WHERE id=?", (*alteracoes.values(), nota_id))

            nota = conn.execute("SELECT * FROM supplier_invoices WHERE id=?", (nota_id,)).fetchone()
            if not nota:
                raise ValueError(f"Nota {nota_id} não encontrada.")

            if nota['account_payable_id']:
                conta = conn.execute(
                    "SELECT installment_number, total_installments FROM accounts_payable WHERE id=?",
                    (nota['account_payable_id'],)
                ).fetchone()
                descricao = _descricao_conta(
                    nota['invoice_number'],
                    conta['installment_number'] if conta else None,
                    conta['total_installments'] if conta else None,
                    _nome_fornecedor(conn, nota['supplier_id']),
                )
                conn.execute('''
                    UPDATE accounts_payable
                    SET amount=?, due_date=?, description=?, supplier_id=?, updated_at=CURRENT_TIMESTAMP
                    WHERE id=?
                ''', (nota['amount'], nota['due_date'], descricao, nota['supplier_id'], nota['account_payable_id']))
    finally:
        conn.close()


def excluir_nota(nota_id: int) -> None:
    """Remove a parcela da nota e a conta a pagar vinculada."""
    conn = conectar()
    try:
        nota = conn.execute("SELECT account_payable_id FROM supplier_invoices WHERE id=?", (nota_id,)).fetchone()
        if not nota:
            raise ValueError(f"Nota {nota_id} não encontrada.")
        with conn:
            conn.execute("DELETE FROM supplier_invoices WHERE id=?", (nota_id,))
            if nota['account_payable_id']:
                conn.execute("DELETE FROM accounts_payable WHERE id=?", (nota['account_payable_id'],))
    finally:
        conn.close()


def excluir_nota_completa(fornecedor_id: int, numero_nota: str) -> int:
    """Remove todas as parcelas de uma nota (e as contas vinculadas). Retorna quantas parcelas saíram."""
    conn = conectar()
    try:
        rows = conn.execute(
            "SELECT id, account_payable_id FROM supplier_invoices WHERE supplier_id=? AND invoice_number=?",
            (fornecedor_id, numero_nota)
        ).fetchall()
        with conn:
            for r in rows:
                conn.execute("DELETE FROM supplier_invoices WHERE id=?", (r['id'],))
                if r['account_payable_id']:
                    conn.execute("DELETE FROM accounts_payable WHERE id=?", (r['account_payable_id'],))
        return len(rows)
    finally:
        conn.close()


def buscar_notas_fornecedor(fornecedor_id: int, hoje: Optional[date] = None) -> pd.DataFrame:
    """Parcelas das notas do fornecedor (mais recentes primeiro), com dados de parcela e status da conta."""
    conn = conectar()
    try:
        df = pd.read_sql_query('''
            SELECT si.id, si.supplier_id, si.invoice_number, si.product_description, si.issue_date, si.due_date,
                   si.amount, si.account_payable_id, si.notes,
                   ap.installment_number, ap.total_installments, ap.status
            FROM supplier_invoices si
            LEFT JOIN accounts_payable ap ON ap.id = si.account_payable_id
            WHERE si.supplier_id=?
            ORDER BY si.due_date DESC, si.id DESC
        ''', conn, params=(fornecedor_id,))
    finally:
        conn.close()

    df['amount'] = df['amount'].astype(float) / 100
    df['status'] = df['status'].fillna('a_vencer')
    return sts.aplicar_status_efetivo(df, hoje)


def buscar_notas_agrupadas(fornecedor_id: int, hoje: Optional[date] = None) -> List[dict]:
    """Notas agrupadas por número (parcelas como filhas), da emissão mais recente para a mais antiga."""
    df = buscar_notas_fornecedor(fornecedor_id, hoje)
    return notas_svc.ordenar_grupos(notas_svc.group_invoices_by_number(df))
