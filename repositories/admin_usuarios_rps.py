import logging
from typing import Optional

import database as db
from conectDB.conexao import conectar
from services import mascaras_svc as msk

logger = logging.getLogger(__name__)

PAPEIS_LABELS = {
    'admin': 'Administrador',
    'financeiro': 'Financeiro',
    'visualizacao': 'Visualização',
}
TAMANHO_MINIMO_SENHA = 6


def _validar_papel(papel: str) -> str:
    if papel not in db.PAPEIS:
        raise ValueError(f"Papel inválido: {papel!r}")
    return papel


def _validar_senha(senha: str) -> str:
    if not senha or len(senha) < TAMANHO_MINIMO_SENHA:
        raise ValueError(f"A senha deve ter pelo menos {TAMANHO_MINIMO_SENHA} caracteres.")
    return senha


def _validar_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = email.strip()
    if not msk.validate_email(email):
        raise ValueError(f"E-mail inválido: {email}")
    return email


def verifica_usuario_existe(username: str) -> bool:
    conn = conectar()
    try:
        row = conn.execute("SELECT 1 FROM usuarios WHERE username = ?", (username,)).fetchone()
        return row is not None
    finally:
        conn.close()


def criar_usuario(username: str, senha: str, nome: str, papel: str = 'visualizacao', email: Optional[str] = None) -> None:
    """Cria o usuário com a senha já transformada em hash bcrypt."""
    username = (username or '').strip()
    if not username:
        raise ValueError("O login é obrigatório.")
    if not nome or not nome.strip():
        raise ValueError("O nome é obrigatório.")
    if verifica_usuario_existe(username):
        raise ValueError(f"O usuário '{username}' já existe.")

    password_hash = db.gerar_hash_senha(_validar_senha(senha))
    conn = conectar()
    try:
        with conn:
            conn.execute("""
                INSERT INTO usuarios (username, password_hash, nome_completo, email, papel, ativo)
                VALUES (?, ?, ?, ?, ?, 1)
            """, (username, password_hash, nome.strip(), _validar_email(email), _validar_papel(papel)))
        logger.info("Usuário '%s' criado com papel %s", username, papel)
    finally:
        conn.close()


def atualizar_usuario(username: str, nome: str, papel: str, ativo: bool, email: Optional[str] = None,
                      nova_senha: Optional[str] = None) -> None:
    """
    Atualiza dados e papel do usuário. A senha só muda quando nova_senha é informada.
    Não permite remover/inativar o último administrador ativo.
    """
    _validar_papel(papel)
    conn = conectar()
    try:
        atual = conn.execute("SELECT papel, ativo FROM usuarios WHERE username=?", (username,)).fetchone()
        if not atual:
            raise ValueError(f"Usuário '{username}' não encontrado.")

        deixa_de_ser_admin = atual['papel'] == 'admin' and atual['ativo'] and (papel != 'admin' or not ativo)
        if deixa_de_ser_admin:
            admins = conn.execute("SELECT COUNT(*) FROM usuarios WHERE papel='admin' AND ativo=1").fetchone()[0]
            if admins <= 1:
                raise ValueError("É preciso manter pelo menos um administrador ativo.")

        with conn:
            conn.execute("""
                UPDATE usuarios
                SET nome_completo=?, email=?, papel=?, ativo=?
                WHERE username=?
            """, (nome, _validar_email(email), papel, db._bool_to_int(ativo), username))

            if nova_senha:
                conn.execute("UPDATE usuarios SET password_hash=? WHERE username=?",
                             (db.gerar_hash_senha(_validar_senha(nova_senha)), username))
    finally:
        conn.close()


def buscar_papel(username: str) -> Optional[str]:
    conn = conectar()
    try:
        row = conn.execute("SELECT papel FROM usuarios WHERE username=? AND ativo=1", (username,)).fetchone()
        return row['papel'] if row else None
    finally:
        conn.close()
