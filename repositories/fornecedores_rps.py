from typing import List, Optional

import pandas as pd

from conectDB.conexao import conectar
import database as db
from repositories import anexos_rps
from services import mascaras_svc as msk
from services import storage_svc as stg

_CAMPOS_EDITAVEIS = (
    'name', 'document', 'document_type', 'category', 'email', 'phone', 'address',
    'city', 'state', 'notes', 'is_active', 'tags', 'default_boleto_url',
)


def _validar_documento(documento: Optional[str], tipo_documento: Optional[str]):
    """Retorna (documento_sem_mascara, tipo) ou levanta ValueError."""
    numeros = msk.unmask_document(documento)
    if not numeros:
        return None, None
    if tipo_documento not in ('cpf', 'cnpj'):
        tipo_documento = 'cpf' if len(numeros) == 11 else 'cnpj'
    if not msk.validate_document(numeros, tipo_documento):
        raise ValueError(f"{tipo_documento.upper()} inválido: {msk.mask_document(numeros, tipo_documento)}")
    return numeros, tipo_documento


def _validar_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = email.strip()
    if not msk.validate_email(email):
        raise ValueError(f"E-mail inválido: {email}")
    return email


def buscar_fornecedores(apenas_ativos: bool = False, busca: Optional[str] = None) -> pd.DataFrame:
    conn = conectar()
    try:
        query = "SELECT * FROM suppliers WHERE 1=1"
        params = []
        if apenas_ativos:
            query += " AND is_active=1"
        if busca:
            query += " AND (name LIKE ? OR document LIKE ?)"
            termo = f"%{busca.strip()}%"
            params += [termo, f"%{msk.unmask_document(busca) or busca.strip()}%"]
        query += " ORDER BY name"
        df = pd.read_sql_query(query, conn, params=params)
        df['tags'] = df['tags'].apply(db._json_to_tags)
        return df
    finally:
        conn.close()


def buscar_detalhe_fornecedor(fornecedor_id: int) -> Optional[dict]:
    conn = conectar()
    try:
        row = conn.execute("SELECT * FROM suppliers WHERE id=?", (fornecedor_id,)).fetchone()
        if not row:
            return None
        dados = dict(row)
        dados['tags'] = db._json_to_tags(dados['tags'])
        return dados
    finally:
        conn.close()


def cadastrar_fornecedor(nome: str, documento: Optional[str] = None, tipo_documento: Optional[str] = None,
                         categoria: Optional[str] = None, email: Optional[str] = None, telefone: Optional[str] = None,
                         endereco: Optional[str] = None, cidade: Optional[str] = None, uf: Optional[str] = None,
                         observacoes: Optional[str] = None, ativo: bool = True, tags: Optional[List[str]] = None,
                         boleto_padrao_url: Optional[str] = None) -> int:
    if not nome or not nome.strip():
        raise ValueError("O nome do fornecedor é obrigatório.")
    doc, tipo = _validar_documento(documento, tipo_documento)
    email = _validar_email(email)

    conn = conectar()
    try:
        with conn:
            cur = conn.execute('''
                INSERT INTO suppliers (name, document, document_type, category, email, phone, address, city, state,
                                       notes, is_active, tags, default_boleto_url)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (nome.strip(), doc, tipo, categoria, email, msk.unmask_document(telefone) or None, endereco, cidade,
                  (uf or '').upper() or None, observacoes, db._bool_to_int(ativo), db._tags_to_json(tags), boleto_padrao_url))
            return cur.lastrowid
    finally:
        conn.close()


def atualizar_fornecedor(fornecedor_id: int, **alteracoes) -> None:
    """Atualiza apenas os campos informados (nomes das colunas da tabela suppliers)."""
    invalidos = set(alteracoes) - set(_CAMPOS_EDITAVEIS)
    if invalidos:
        raise ValueError(f"Campos não editáveis: {', '.join(sorted(invalidos))}")
    if not alteracoes:
        return

    if 'name' in alteracoes and not (alteracoes['name'] or '').strip():
        raise ValueError("O nome do fornecedor é obrigatório.")
    if 'document' in alteracoes or 'document_type' in alteracoes:
        atual = buscar_detalhe_fornecedor(fornecedor_id) or {}
        doc, tipo = _validar_documento(
            alteracoes.get('document', atual.get('document')),
            alteracoes.get('document_type', atual.get('document_type')),
        )
        alteracoes['document'], alteracoes['document_type'] = doc, tipo
    if 'email' in alteracoes:
        alteracoes['email'] = _validar_email(alteracoes['email'])
    if 'phone' in alteracoes:
        alteracoes['phone'] = msk.unmask_document(alteracoes['phone']) or None
    if 'tags' in alteracoes:
        alteracoes['tags'] = db._tags_to_json(alteracoes['tags'])
    if 'is_active' in alteracoes:
        alteracoes['is_active'] = db._bool_to_int(alteracoes['is_active'])

    colunas = ", ".join(f"{c}=?" for c in alteracoes)
    conn = conectar()
    try:
        with conn:
            cur = conn.execute(
                f"UPDATE suppliers SET {colunas}, updated_at=CURRENT_TIMESTAMP WHERE id=?",
                (*alteracoes.values(), fornecedor_id)
            )
            if cur.rowcount == 0:
                raise ValueError(f"Fornecedor {fornecedor_id} não encontrado.")
    finally:
        conn.close()


def excluir_fornecedor(fornecedor_id: int) -> None:
    """Remove o fornecedor. Bloqueia se ainda houver contas a pagar ou notas vinculadas."""
    conn = conectar()
    try:
        vinculos = conn.execute('''
            SELECT (SELECT COUNT(*) FROM accounts_payable WHERE supplier_id=?) +
                   (SELECT COUNT(*) FROM supplier_invoices WHERE supplier_id=?)
        ''', (fornecedor_id, fornecedor_id)).fetchone()[0]
        if vinculos:
            raise ValueError("Fornecedor possui contas a pagar ou notas fiscais vinculadas e não pode ser excluído.")
        with conn:
            conn.execute("DELETE FROM suppliers WHERE id=?", (fornecedor_id,))
    finally:
        conn.close()


def definir_boleto_padrao(fornecedor_id: int, nome_arquivo: str, conteudo: bytes,
                          tipo_arquivo: Optional[str] = None, enviado_por: Optional[str] = None) -> str:
    """Envia o boleto padrão do fornecedor (fica também na lista de anexos dele) e grava a URL."""
    if not buscar_detalhe_fornecedor(fornecedor_id):
        raise ValueError(f"Fornecedor {fornecedor_id} não encontrado.")
    res = anexos_rps.enviar_anexo('supplier', fornecedor_id, nome_arquivo, conteudo, tipo_arquivo, enviado_por)
    atualizar_fornecedor(fornecedor_id, default_boleto_url=res['file_url'])
    return res['file_url']


def baixar_boleto_padrao(fornecedor_id: int) -> Optional[bytes]:
    """Conteúdo do boleto padrão via link novo de download, ou None se não houver boleto."""
    fornecedor = buscar_detalhe_fornecedor(fornecedor_id)
    if not fornecedor or not fornecedor.get('default_boleto_url'):
        return None
    caminho = stg.caminho_da_url(fornecedor['default_boleto_url'])
    if not caminho:
        raise ValueError("URL do boleto inválida.")
    return anexos_rps.abrir_link(stg.gerar_url_assinada(caminho, stg.VALIDADE_DOWNLOAD))
