import logging
from typing import List, Optional

import pandas as pd

from conectDB.conexao import conectar
from services import storage_svc as stg

logger = logging.getLogger(__name__)

_ALIASES = {
    'receivable': ('receivable', 'account_receivable', 'accounts_receivable'),
    'payable': ('payable', 'account_payable', 'accounts_payable'),
}


def normalizar_tipo_registro(tipo_registro: str) -> str:
    for normalizado, nomes in _ALIASES.items():
        if tipo_registro in nomes:
            return normalizado
    return tipo_registro


def aliases_tipo_registro(tipo_registro: str) -> List[str]:
    normalizado = normalizar_tipo_registro(tipo_registro)
    nomes = list(_ALIASES.get(normalizado, (normalizado,)))
    if tipo_registro not in nomes:
        nomes.append(tipo_registro)
    return nomes


def buscar_anexos(tipo_registro: str, registro_id: int) -> pd.DataFrame:
    """Anexos de um registro (mais recentes primeiro), aceitando os nomes antigos do tipo."""
    nomes = aliases_tipo_registro(tipo_registro)
    conn = conectar()
    try:
        marcadores = ", ".join("?" for _ in nomes)
        return pd.read_sql_query(f'''
            SELECT * FROM attachments
            WHERE record_type IN ({marcadores}) AND record_id=?
            ORDER BY created_at DESC, id DESC
        ''', conn, params=(*nomes, registro_id))
    finally:
        conn.close()


def buscar_anexo(anexo_id: int) -> Optional[dict]:
    conn = conectar()
    try:
        row = conn.execute("SELECT * FROM attachments WHERE id=?", (anexo_id,)).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def enviar_anexo(tipo_registro: str, registro_id: int, nome_arquivo: str, conteudo: bytes,
                 tipo_arquivo: Optional[str] = None, enviado_por: Optional[str] = None) -> dict:
    """
    Grava o arquivo no armazenamento e registra o anexo com uma URL assinada de 1 ano.
    Se o registro no banco falhar, o arquivo gravado é removido.
    """
    if not nome_arquivo:
        raise ValueError("Nome do arquivo é obrigatório.")
    if not conteudo:
        raise ValueError("Arquivo vazio.")

    caminho = stg.montar_caminho(registro_id, nome_arquivo)
    stg.salvar_objeto(caminho, conteudo)
    url = stg.gerar_url_assinada(caminho, stg.VALIDADE_ANEXO)

    conn = conectar()
    try:
        with conn:
            cur = conn.execute('''
                INSERT INTO attachments (record_id, record_type, file_name, file_type, file_url, file_size, uploaded_by)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (registro_id, normalizar_tipo_registro(tipo_registro), nome_arquivo,
                  tipo_arquivo or 'application/pdf', url, len(conteudo), enviado_por))
            anexo_id = cur.lastrowid
    except Exception:
        stg.remover_objeto(caminho)
        raise
    finally:
        conn.close()

    return {'id': anexo_id, 'file_url': url, 'file_name': nome_arquivo, 'storage_path': caminho}


def excluir_anexo(anexo_id: int) -> None:
    """Remove o arquivo do armazenamento e o registro do anexo."""
    anexo = buscar_anexo(anexo_id)
    if not anexo:
        raise ValueError(f"Anexo {anexo_id} não encontrado.")

    caminho = stg.caminho_da_url(anexo['file_url'])
    if caminho:
        stg.remover_objeto(caminho)

    conn = conectar()
    try:
        with conn:
            conn.execute("DELETE FROM attachments WHERE id=?", (anexo_id,))
    finally:
        conn.close()


def gerar_link_download(anexo_id: int) -> str:
    """Gera uma URL nova de 1 hora (a URL gravada pode já ter expirado)."""
    anexo = buscar_anexo(anexo_id)
    if not anexo:
        raise ValueError(f"Anexo {anexo_id} não encontrado.")
    caminho = stg.caminho_da_url(anexo['file_url'])
    if not caminho:
        raise ValueError("URL do anexo inválida.")
    return stg.gerar_url_assinada(caminho, stg.VALIDADE_DOWNLOAD)


def abrir_link(url: str) -> bytes:
    caminho = stg.verificar_url_assinada(url)
    if caminho is None:
        raise ValueError("Link expirado ou inválido.")
    return stg.ler_objeto(caminho)


def baixar_anexo(anexo_id: int) -> tuple:
    """Retorna (nome_arquivo, tipo, conteudo) passando por um link novo de download."""
    anexo = buscar_anexo(anexo_id)
    if not anexo:
        raise ValueError(f"Anexo {anexo_id} não encontrado.")
    conteudo = abrir_link(gerar_link_download(anexo_id))
    return anexo['file_name'], anexo['file_type'], conteudo
