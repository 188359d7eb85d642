"""
Contas a pagar e a receber.

As duas tabelas têm o mesmo formato; as funções recebem tipo='pagar' ou tipo='receber'.
Valores ficam em centavos no banco e saem em reais (float) nas consultas.
O status efetivo (vencida / a vencer) é sempre calculado na leitura.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

import pandas as pd

from conectDB.conexao import conectar
import database as db
from services import parcelas_svc as parc
from services import status_svc as sts

logger = logging.getLogger(__name__)

_TABELAS = {
    'pagar': {'tabela': 'accounts_payable', 'valor_pago': 'paid_amount'},
    'receber': {'tabela': 'accounts_receivable', 'valor_pago': 'received_amount'},
}

_CAMPOS_EDITAVEIS_COMUNS = (
    'description', 'amount', 'due_date', 'category', 'notes', 'interest_rate', 'fine_rate',
    'is_recurring', 'recurrence_type', 'tags', 'status',
)
_CAMPOS_EDITAVEIS = {
    'pagar': _CAMPOS_EDITAVEIS_COMUNS + ('supplier_id',),
    'receber': _CAMPOS_EDITAVEIS_COMUNS + ('customer_name', 'customer_document'),
}


def _cfg(tipo: str) -> dict:
    try:
        return _TABELAS[tipo]
    except KeyError:
        raise ValueError(f"Tipo de conta inválido: {tipo!r} (use 'pagar' ou 'receber')")


def _colunas_em_reais(tipo: str):
    return ('amount', 'interest_amount', 'fine_amount', _cfg(tipo)['valor_pago'])


def _conta_vinculada_nota(conn, conta_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM supplier_invoices WHERE account_payable_id=?", (conta_id,)).fetchone()
    return row is not None


def _linha_para_dict(tipo: str, row, hoje: Optional[date] = None) -> dict:
    dados = dict(row)
    for col in _colunas_em_reais(tipo):
        if dados.get(col) is not None:
            dados[col] = db.from_cents(dados[col])
    dados['tags'] = db._json_to_tags(dados.get('tags'))
    dados['is_recurring'] = bool(dados.get('is_recurring'))
    dados['status_efetivo'] = sts.calculate_effective_status(dados['status'], dados['due_date'], hoje)
    return dados


def _inserir_parcelas(conn, tipo: str, campos: dict, parcelas: List[dict]) -> List[int]:
    tabela = _cfg(tipo)['tabela']
    ids = []
    for p in parcelas:
        linha = {
            **campos,
            'amount': db.to_cents(p['amount']),
            'due_date': p['due_date'],
            'installment_number': p['installment_number'],
            'total_installments': p['total_installments'],
            'status': 'a_vencer',
        }
        colunas = ", ".join(linha)
        marcadores = ", ".join("?" for _ in linha)
        cur = conn.execute(f"INSERT INTO {tabela} ({colunas}) VALUES ({marcadores})", tuple(linha.values()))
        ids.append(cur.lastrowid)
    return ids


def _campos_comuns(descricao, valor, categoria, observacoes, juros_pct, multa_pct, recorrente,
                   tipo_recorrencia, tags, criado_por) -> dict:
    if not descricao or not descricao.strip():
        raise ValueError("A descrição é obrigatória.")
    db._ensure_positive_number("Valor", valor)
    return {
        'description': descricao.strip(),
        'category': categoria,
        'notes': observacoes,
        'interest_rate': juros_pct,
        'fine_rate': multa_pct,
        'is_recurring': db._bool_to_int(recorrente),
        'recurrence_type': parc.normalizar_recorrencia(tipo_recorrencia) if recorrente or tipo_recorrencia else None,
        'tags': db._tags_to_json(tags),
        'created_by': criado_por,
    }


# --- CADASTRO ---

def cadastrar_conta_pagar(descricao: str, fornecedor_id: int, valor: float, vencimento, total_parcelas: int = 1,
                          categoria: Optional[str] = None, observacoes: Optional[str] = None,
                          juros_pct: Optional[float] = None, multa_pct: Optional[float] = None,
                          recorrente: bool = False, tipo_recorrencia: Optional[str] = None,
                          tags: Optional[List[str]] = None, criado_por: Optional[str] = None) -> List[int]:
    """
    Lança a conta dividida em parcelas mensais (1 parcela = conta única).
    Retorna os ids criados, na ordem das parcelas.
    """
    campos = _campos_comuns(descricao, valor, categoria, observacoes, juros_pct, multa_pct,
                            recorrente, tipo_recorrencia, tags, criado_por)
    campos['supplier_id'] = fornecedor_id
    parcelas = parc.gerar_parcelas(valor, vencimento, total_parcelas)

    conn = conectar()
    try:
        if not conn.execute("SELECT 1 FROM suppliers WHERE id=?", (fornecedor_id,)).fetchone():
            raise ValueError(f"Fornecedor {fornecedor_id} não encontrado.")
        with conn:
            return _inserir_parcelas(conn, 'pagar', campos, parcelas)
    finally:
        conn.close()


def cadastrar_conta_receber(descricao: str, cliente: str, valor: float, vencimento, total_parcelas: int = 1,
                            documento_cliente: Optional[str] = None, categoria: Optional[str] = None,
                            observacoes: Optional[str] = None, juros_pct: Optional[float] = None,
                            multa_pct: Optional[float] = None, recorrente: bool = False,
                            tipo_recorrencia: Optional[str] = None, tags: Optional[List[str]] = None,
                            criado_por: Optional[str] = None) -> List[int]:
    if not cliente or not cliente.strip():
        raise ValueError("O nome do cliente é obrigatório.")
    campos = _campos_comuns(descricao, valor, categoria, observacoes, juros_pct, multa_pct,
                            recorrente, tipo_recorrencia, tags, criado_por)
    campos['customer_name'] = cliente.strip()
    campos['customer_document'] = documento_cliente
    parcelas = parc.gerar_parcelas(valor, vencimento, total_parcelas)

    conn = conectar()
    try:
        with conn:
            return _inserir_parcelas(conn, 'receber', campos, parcelas)
    finally:
        conn.close()


# --- CONSULTAS ---

def buscar_contas(tipo: str, status: Optional[str] = None, hoje: Optional[date] = None) -> pd.DataFrame:
    """
    Lista as contas ordenadas por vencimento, com a coluna 'status_efetivo'.
    O filtro de status usa o status efetivo (ex.: 'vencida' inclui contas gravadas como a_vencer já passadas).
    Contas a pagar trazem também 'supplier_name' e 'is_from_invoice'.
    """
    cfg = _cfg(tipo)
    conn = conectar()
    try:
        if tipo == 'pagar':
            query = """
                SELECT ap.*, s.name AS supplier_name,
                       EXISTS (SELECT 1 FROM supplier_invoices si WHERE si.account_payable_id = ap.id) AS is_from_invoice
                FROM accounts_payable ap
                LEFT JOIN suppliers s ON s.id = ap.supplier_id
                ORDER BY ap.due_date, ap.id
            """
        else:
            query = f"SELECT * FROM {cfg['tabela']} ORDER BY due_date, id"
        df = pd.read_sql_query(query, conn)
    finally:
        conn.close()

    for col in _colunas_em_reais(tipo):
        df[col] = df[col].astype(float) / 100
    df['tags'] = df['tags'].apply(db._json_to_tags)
    if 'is_from_invoice' in df.columns:
        df['is_from_invoice'] = df['is_from_invoice'].astype(bool)
    df = sts.aplicar_status_efetivo(df, hoje)

    if status:
        df = df[df['status_efetivo'] == status].reset_index(drop=True)
    return df


def buscar_detalhe_conta(tipo: str, conta_id: int, hoje: Optional[date] = None) -> Optional[dict]:
    cfg = _cfg(tipo)
    conn = conectar()
    try:
        row = conn.execute(f"SELECT * FROM {cfg['tabela']} WHERE id=?", (conta_id,)).fetchone()
        if not row:
            return None
        dados = _linha_para_dict(tipo, row, hoje)
        if tipo == 'pagar':
            dados['is_from_invoice'] = _conta_vinculada_nota(conn, conta_id)
        return dados
    finally:
        conn.close()


# --- ALTERAÇÕES ---

def atualizar_conta(tipo: str, conta_id: int, **alteracoes) -> None:
    cfg = _cfg(tipo)
    invalidos = set(alteracoes) - set(_CAMPOS_EDITAVEIS[tipo])
    if invalidos:
        raise ValueError(f"Campos não editáveis: {', '.join(sorted(invalidos))}")
    if not alteracoes:
        return

    if 'amount' in alteracoes:
        db._ensure_positive_number("Valor", alteracoes['amount'])
        alteracoes['amount'] = db.to_cents(alteracoes['amount'])
    if 'due_date' in alteracoes:
        alteracoes['due_date'] = db._to_iso(alteracoes['due_date'])
        if alteracoes['due_date'] is None:
            raise ValueError("A data de vencimento é obrigatória.")
    if 'description' in alteracoes and not (alteracoes['description'] or '').strip():
        raise ValueError("A descrição é obrigatória.")
    if 'status' in alteracoes and alteracoes['status'] not in db.STATUS_CONTA:
        raise ValueError(f"Status inválido: {alteracoes['status']!r}")
    if 'recurrence_type' in alteracoes:
        alteracoes['recurrence_type'] = parc.normalizar_recorrencia(alteracoes['recurrence_type'])
    if 'is_recurring' in alteracoes:
        alteracoes['is_recurring'] = db._bool_to_int(alteracoes['is_recurring'])
    if 'tags' in alteracoes:
        alteracoes['tags'] = db._tags_to_json(alteracoes['tags'])

    colunas = ", ".join(f"{c}=?" for c in alteracoes)
    conn = conectar()
    try:
        if tipo == 'pagar' and _conta_vinculada_nota(conn, conta_id):
            raise ValueError("Esta conta é vinculada a uma Nota Fiscal e só pode ser editada na aba de Fornecedores.")
        with conn:
            cur = conn.execute(
                f"UPDATE {cfg['tabela']} SET {colunas}, updated_at=CURRENT_TIMESTAMP WHERE id=?",
                (*alteracoes.values(), conta_id)
            )
            if cur.rowcount == 0:
                raise ValueError(f"Conta {conta_id} não encontrada.")
    finally:
        conn.close()


def excluir_conta(tipo: str, conta_id: int) -> None:
    cfg = _cfg(tipo)
    conn = conectar()
    try:
        if tipo == 'pagar' and _conta_vinculada_nota(conn, conta_id):
            raise ValueError("Esta conta é vinculada a uma Nota Fiscal e só pode ser excluída na aba de Fornecedores.")
        with conn:
            conn.execute(f"DELETE FROM {cfg['tabela']} WHERE id=?", (conta_id,))
    finally:
        conn.close()


def registrar_pagamento(tipo: str, conta_id: int, valor_pago: Optional[float] = None, juros: float = 0,
                        multa: float = 0, data_pagamento=None) -> None:
    """
    Marca a conta como paga. Sem valor informado, considera valor + juros + multa.
    """
    cfg = _cfg(tipo)
    conn = conectar()
    try:
        row = conn.execute(f"SELECT amount, status FROM {cfg['tabela']} WHERE id=?", (conta_id,)).fetchone()
        if not row:
            raise ValueError(f"Conta {conta_id} não encontrada.")
        if row['status'] in sts.STATUS_FINAIS:
            raise ValueError(f"Conta já está '{sts.label_status(row['status'])}'.")

        juros_c, multa_c = db.to_cents(juros), db.to_cents(multa)
        if juros_c < 0 or multa_c < 0:
            raise ValueError("Juros e multa não podem ser negativos.")
        pago_c = db.to_cents(valor_pago) if valor_pago is not None else row['amount'] + juros_c + multa_c
        if pago_c <= 0:
            raise ValueError("O valor pago deve ser maior que zero.")

        with conn:
            conn.execute(f'''
                UPDATE {cfg['tabela']}
                SET status='paga', payment_date=?, {cfg['valor_pago']}=?, interest_amount=?, fine_amount=?,
                    updated_at=CURRENT_TIMESTAMP
                WHERE id=?
            ''', (db._to_iso(data_pagamento) or date.today().isoformat(), pago_c, juros_c or None, multa_c or None, conta_id))
    finally:
        conn.close()


def estornar_pagamento(tipo: str, conta_id: int) -> None:
    """Desfaz o pagamento: volta para a_vencer (o status efetivo reavalia o vencimento)."""
    cfg = _cfg(tipo)
    conn = conectar()
    try:
        row = conn.execute(f"SELECT status FROM {cfg['tabela']} WHERE id=?", (conta_id,)).fetchone()
        if not row:
            raise ValueError(f"Conta {conta_id} não encontrada.")
        if row['status'] != 'paga':
            raise ValueError("Apenas contas pagas podem ser estornadas.")
        with conn:
            conn.execute(f'''
                UPDATE {cfg['tabela']}
                SET status='a_vencer', payment_date=NULL, {cfg['valor_pago']}=NULL, interest_amount=NULL,
                    fine_amount=NULL, updated_at=CURRENT_TIMESTAMP
                WHERE id=?
            ''', (conta_id,))
    finally:
        conn.close()


def renegociar_conta(tipo: str, conta_id: int, nova_data, juros: float = 0, multa: float = 0,
                     novo_valor: Optional[float] = None, usuario: Optional[str] = None) -> int:
    """
    Encerra a conta original como 'renegociada' e cria uma nova conta filha
    (parent_id) com o novo vencimento e valor = (novo_valor ou valor original) + juros + multa.
    Retorna o id da nova conta.
    """
    cfg = _cfg(tipo)
    nova_data_iso = db._to_iso(nova_data)
    if nova_data_iso is None:
        raise ValueError("Informe a nova data de vencimento.")

    conn = conectar()
    try:
        row = conn.execute(f"SELECT * FROM {cfg['tabela']} WHERE id=?", (conta_id,)).fetchone()
        if not row:
            raise ValueError(f"Conta {conta_id} não encontrada.")
        original = dict(row)
        if original['status'] in sts.STATUS_FINAIS:
            raise ValueError(f"Conta já está '{sts.label_status(original['status'])}' e não pode ser renegociada.")

        juros_c, multa_c = db.to_cents(juros), db.to_cents(multa)
        base_c = db.to_cents(novo_valor) if novo_valor is not None else original['amount']
        total_c = base_c + juros_c + multa_c
        if total_c <= 0:
            raise ValueError("O valor renegociado deve ser maior que zero.")

        nova = {k: v for k, v in original.items() if k not in (
            'id', 'created_at', 'updated_at', 'payment_date', cfg['valor_pago'],
            'renegotiated_at', 'renegotiated_by', 'interest_amount', 'fine_amount',
        )}
        nova.update({
            'amount': total_c,
            'due_date': nova_data_iso,
            'status': 'a_vencer',
            'parent_id': conta_id,
            'original_due_date': original['original_due_date'] or original['due_date'],
            'interest_amount': juros_c or None,
            'fine_amount': multa_c or None,
            'created_by': usuario or original['created_by'],
        })

        with conn:
            conn.execute(f'''
                UPDATE {cfg['tabela']}
                SET status='renegociada', renegotiated_at=?, renegotiated_by=?, updated_at=CURRENT_TIMESTAMP
                WHERE id=?
            ''', (datetime.now(), usuario, conta_id))
            colunas = ", ".join(nova)
            marcadores = ", ".join("?" for _ in nova)
            cur = conn.execute(f"INSERT INTO {cfg['tabela']} ({colunas}) VALUES ({marcadores})", tuple(nova.values()))
            novo_id = cur.lastrowid
        logger.info("Conta %s/%s renegociada -> %s", tipo, conta_id, novo_id)
        return novo_id
    finally:
        conn.close()


def buscar_categorias(tipo: Optional[str] = None) -> List[str]:
    """Categorias distintas já usadas (em uma ou nas duas tabelas)."""
    tipos = [tipo] if tipo else list(_TABELAS)
    conn = conectar()
    try:
        cats = set()
        for t in tipos:
            rows = conn.execute(f"SELECT DISTINCT category FROM {_cfg(t)['tabela']} WHERE category IS NOT NULL").fetchall()
            cats.update(r[0] for r in rows if r[0])
        return sorted(cats)
    finally:
        conn.close()
