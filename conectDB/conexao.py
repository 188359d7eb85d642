import os
import sqlite3

# --- 2. CONEXÃO ---
DB_PATH = os.environ.get('GESTAO_DB_PATH', 'gestao.db')
_DEFAULT_TIMEOUT = 10

def conectar() -> sqlite3.Connection:
    """Retorna uma nova conexão SQLite configurada para uso em app web (check_same_thread=False).
    As chaves estrangeiras ficam ligadas em toda conexão.
    """
    conn = sqlite3.connect(DB_PATH, check_same_thread=False, timeout=_DEFAULT_TIMEOUT)
    # Usar row factory facilita leitura por nome
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
