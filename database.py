"""
Módulo de banco de dados do sistema de Gestão Financeira & RH.
Objetivos:
- Centralizar o esquema (tabelas criadas de forma idempotente em init_db).
- Manter helpers comuns (centavos, datas, booleanos, tags) usados pelos repositórios.
- Configurar o logging do processo.
- Verificar credenciais (bcrypt) e criar o primeiro administrador a partir do ambiente.
"""

import os
import sqlite3
import bcrypt
import json
import logging
from datetime import date, datetime
from calendar import monthrange
from typing import Tuple, List, Any, Optional
import pandas as pd

from conectDB import conexao as cnc

# --- Logging ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

# --- 1. ADAPTERS (Datas) ---
def adapt_date(val: date) -> str:
    return val.isoformat()

def adapt_datetime(val: datetime) -> str:
    # SQLite espera 'YYYY-MM-DD HH:MM:SS' para datetime
    return val.isoformat(" ")

sqlite3.register_adapter(date, adapt_date)
sqlite3.register_adapter(datetime, adapt_datetime)


STATUS_CONTA = ('a_vencer', 'vencida', 'paga', 'renegociada')
PAPEIS = ('admin', 'financeiro', 'visualizacao')


# --- Helpers internos ---
def _get_valid_date(year: int, month: int, day: int) -> date:
    """Retorna uma data válida ajustando o dia se ultrapassar o último dia do mês."""
    max_day = monthrange(year, month)[1]
    return date(year, month, min(day, max_day))

def _ensure_positive_number(name: str, value: Any) -> float:
    try:
        v = float(value)
    except Exception:
        raise ValueError(f"{name} precisa ser um número (float/int). Recebido: {value!r}")
    if v <= 0:
        raise ValueError(f"{name} deve ser maior que zero.")
    return v

def _bool_to_int(b: bool) -> int:
    return 1 if b else 0

def _to_iso(val) -> Optional[str]:
    """Normaliza date/datetime/str para 'YYYY-MM-DD'."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val.date().isoformat()
    if isinstance(val, date):
        return val.isoformat()
    return str(val).split('T')[0]

def _tags_to_json(tags: Optional[List[str]]) -> Optional[str]:
    if not tags:
        return None
    return json.dumps([t.strip() for t in tags if t and t.strip()], ensure_ascii=False)

def _json_to_tags(val) -> List[str]:
    if not val:
        return []
    try:
        return list(json.loads(val))
    except (TypeError, ValueError):
        return []


# --- HELPERS DE CONVERSÃO MONETÁRIA (Centavos) ---

def to_cents(val) -> int:
    """Converte R$ 10,00 (float/str) para 1000 (int centavos) para salvar no banco."""
    if val is None: return 0
    try:
        return int(round(float(val) * 100))
    except Exception:
        return 0

def from_cents(val) -> float:
    """Converte 1000 (int centavos) do banco para 10.00 (float) para exibir."""
    if val is None: return 0.0
    try:
        return float(val) / 100.0
    except Exception:
        return 0.0


# --- 2. ESQUEMA ---

_SCHEMA = """
CREATE TABLE IF NOT EXISTS usuarios (
    username TEXT PRIMARY KEY,
    password_hash TEXT NOT NULL,
    nome_completo TEXT NOT NULL,
    email TEXT,
    papel TEXT NOT NULL DEFAULT 'visualizacao' CHECK (papel IN ('admin', 'financeiro', 'visualizacao')),
    ativo INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS suppliers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    document TEXT,
    document_type TEXT CHECK (document_type IS NULL OR document_type IN ('cpf', 'cnpj')),
    category TEXT,
    email TEXT,
    phone TEXT,
    address TEXT,
    city TEXT,
    state TEXT,
    notes TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    tags TEXT,
    default_boleto_url TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS accounts_payable (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    description TEXT NOT NULL,
    supplier_id INTEGER NOT NULL REFERENCES suppliers(id),
    amount INTEGER NOT NULL CHECK (amount > 0),
    due_date TEXT NOT NULL,
    payment_date TEXT,
    status TEXT NOT NULL DEFAULT 'a_vencer' CHECK (status IN ('a_vencer', 'vencida', 'paga', 'renegociada')),
    category TEXT,
    notes TEXT,
    installment_number INTEGER,
    total_installments INTEGER,
    interest_rate REAL,
    fine_rate REAL,
    interest_amount INTEGER,
    fine_amount INTEGER,
    paid_amount INTEGER,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    recurrence_type TEXT CHECK (recurrence_type IS NULL OR recurrence_type IN ('daily', 'weekly', 'monthly', 'yearly')),
    parent_id INTEGER REFERENCES accounts_payable(id) ON DELETE SET NULL,
    original_due_date TEXT,
    renegotiated_at TEXT,
    renegotiated_by TEXT,
    created_by TEXT,
    tags TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    CHECK (installment_number IS NULL OR total_installments IS NULL OR installment_number <= total_installments)
);

CREATE TABLE IF NOT EXISTS accounts_receivable (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    description TEXT NOT NULL,
    customer_name TEXT NOT NULL,
    customer_document TEXT,
    amount INTEGER NOT NULL CHECK (amount > 0),
    due_date TEXT NOT NULL,
    payment_date TEXT,
    status TEXT NOT NULL DEFAULT 'a_vencer' CHECK (status IN ('a_vencer', 'vencida', 'paga', 'renegociada')),
    category TEXT,
    notes TEXT,
    installment_number INTEGER,
    total_installments INTEGER,
    interest_rate REAL,
    fine_rate REAL,
    interest_amount INTEGER,
    fine_amount INTEGER,
    received_amount INTEGER,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    recurrence_type TEXT CHECK (recurrence_type IS NULL OR recurrence_type IN ('daily', 'weekly', 'monthly', 'yearly')),
    parent_id INTEGER REFERENCES accounts_receivable(id) ON DELETE SET NULL,
    original_due_date TEXT,
    renegotiated_at TEXT,
    renegotiated_by TEXT,
    created_by TEXT,
    tags TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    CHECK (installment_number IS NULL OR total_installments IS NULL OR installment_number <= total_installments)
);

CREATE TABLE IF NOT EXISTS supplier_invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    supplier_id INTEGER NOT NULL REFERENCES suppliers(id),
    invoice_number TEXT NOT NULL,
    product_description TEXT,
    issue_date TEXT NOT NULL,
    due_date TEXT NOT NULL,
    amount INTEGER NOT NULL,
    account_payable_id INTEGER REFERENCES accounts_payable(id) ON DELETE SET NULL,
    notes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    record_id INTEGER NOT NULL,
    record_type TEXT NOT NULL,
    file_name TEXT NOT NULL,
    file_type TEXT NOT NULL,
    file_url TEXT NOT NULL,
    file_size INTEGER,
    uploaded_by TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS system_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT,
    user_name TEXT,
    action TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT,
    details TEXT,
    status TEXT NOT NULL DEFAULT 'success' CHECK (status IN ('success', 'error')),
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS employees (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    document TEXT,
    role TEXT,
    sector TEXT,
    salary INTEGER NOT NULL DEFAULT 0,
    vt_value INTEGER NOT NULL DEFAULT 0,
    vr_value INTEGER NOT NULL DEFAULT 0,
    admission_date TEXT,
    resignation_date TEXT,
    status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'inactive', 'vacation')),
    bank_info TEXT,
    photo_url TEXT,
    notes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    color TEXT NOT NULL DEFAULT '#6b7280',
    entity_type TEXT NOT NULL DEFAULT 'all' CHECK (entity_type IN ('supplier', 'payable', 'receivable', 'all')),
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (name, entity_type)
);

CREATE INDEX IF NOT EXISTS idx_payable_due ON accounts_payable(due_date);
CREATE INDEX IF NOT EXISTS idx_receivable_due ON accounts_receivable(due_date);
CREATE INDEX IF NOT EXISTS idx_invoices_supplier ON supplier_invoices(supplier_id, invoice_number);
CREATE INDEX IF NOT EXISTS idx_attachments_record ON attachments(record_type, record_id);
CREATE INDEX IF NOT EXISTS idx_logs_created ON system_logs(created_at);
"""


def init_db() -> None:
    """Cria as tabelas (idempotente) e o administrador inicial, se configurado no ambiente."""
    conn = cnc.conectar()
    try:
        with conn:
            conn.executescript(_SCHEMA)
    finally:
        conn.close()
    logger.info("Esquema verificado em %s", cnc.DB_PATH)
    garantir_admin_inicial()


def gerar_hash_senha(senha_plana: str) -> str:
    """Gera um hash bcrypt (salt automático) e devolve como texto para o SQLite."""
    hash_bytes = bcrypt.hashpw(senha_plana.encode('utf-8'), bcrypt.gensalt())
    return hash_bytes.decode('utf-8')


def garantir_admin_inicial() -> bool:
    """Cria o primeiro admin a partir de INITIAL_ADMIN_USERNAME / INITIAL_ADMIN_PASSWORD.
    Só age quando não existe nenhum usuário. Retorna True se criou.
    """
    username = os.environ.get('INITIAL_ADMIN_USERNAME')
    senha = os.environ.get('INITIAL_ADMIN_PASSWORD')
    if not username or not senha:
        return False

    conn = cnc.conectar()
    try:
        existe = conn.execute("SELECT COUNT(*) FROM usuarios").fetchone()[0]
        if existe:
            return False
        with conn:
            conn.execute('''
                INSERT INTO usuarios (username, password_hash, nome_completo, papel, ativo)
                VALUES (?, ?, ?, 'admin', 1)
            ''', (username, gerar_hash_senha(senha), os.environ.get('INITIAL_ADMIN_NAME', 'Administrador')))
        logger.info("Administrador inicial '%s' criado.", username)
        return True
    finally:
        conn.close()


# --- 3. Credenciais ---

def verificar_credenciais(usuario: str, senha_digitada: str) -> Tuple[bool, Optional[str], Optional[str]]:
    """Verifica credenciais.
    Retorna (ok, nome_completo, papel).
    """
    conn = cnc.conectar()
    try:
        row = conn.execute(
            "SELECT nome_completo, papel, password_hash FROM usuarios WHERE username = ? AND ativo=1",
            (usuario,)
        ).fetchone()

        if not row:
            return False, None, None

        try:
            if bcrypt.checkpw(senha_digitada.encode('utf-8'), row['password_hash'].encode('utf-8')):
                return True, row['nome_completo'], row['papel']
        except ValueError:
            # Hash inválido/corrompido no banco
            logger.warning("Hash de senha inválido para o usuário %s", usuario)
            return False, None, None

        return False, None, None
    finally:
        conn.close()


def buscar_lista_usuarios() -> pd.DataFrame:
    """
    Retorna DataFrame com dados básicos dos usuários para listagem.
    """
    conn = cnc.conectar()
    try:
        return pd.read_sql("SELECT username, nome_completo, email, papel, ativo FROM usuarios ORDER BY nome_completo", conn)
    finally:
        conn.close()
