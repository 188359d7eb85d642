"""Armazenamento de arquivos (anexos, boletos, fotos) em disco local com URLs assinadas.

Os objetos ficam em GESTAO_STORAGE_DIR/<bucket>/<caminho>. O acesso é feito por
URLs com validade, assinadas com HMAC-SHA256 (GESTAO_STORAGE_SECRET).
"""

import hashlib
import hmac
import logging
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode, urlparse, parse_qs, quote, unquote

logger = logging.getLogger(__name__)

STORAGE_DIR = os.environ.get('GESTAO_STORAGE_DIR', 'storage')
SEGREDO_PADRAO = 'troque-este-segredo'
BUCKET = 'attachments'
_PREFIXO_URL = f'storage://{BUCKET}/'

VALIDADE_ANEXO = 60 * 60 * 24 * 365  # 1 ano
VALIDADE_DOWNLOAD = 60 * 60  # 1 hora


def ler_segredo() -> str:
    """Segredo das URLs assinadas. Sem GESTAO_STORAGE_SECRET, usa o padrão e avisa no log."""
    segredo = os.environ.get('GESTAO_STORAGE_SECRET')
    if not segredo:
        logger.warning("GESTAO_STORAGE_SECRET não definido: URLs de anexos assinadas com o segredo padrão. "
                       "Defina a variável em produção.")
        return SEGREDO_PADRAO
    return segredo


STORAGE_SECRET = ler_segredo()


def sanitizar_nome(nome_arquivo: str) -> str:
    return re.sub(r'[^a-zA-Z0-9.-]', '_', nome_arquivo or '')


def montar_caminho(record_id, nome_arquivo: str) -> str:
    """'{record_id}/{timestamp}_{aleatorio}.{ext}' (extensão em minúsculas, padrão pdf)."""
    nome = sanitizar_nome(nome_arquivo)
    ext = nome.rsplit('.', 1)[-1].lower() if '.' in nome else 'pdf'
    unico = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"
    return f"{record_id}/{unico}.{ext or 'pdf'}"


def _resolver(caminho: str) -> Path:
    raiz = (Path(STORAGE_DIR) / BUCKET).resolve()
    destino = (raiz / caminho).resolve()
    if raiz != destino and raiz not in destino.parents:
        raise ValueError(f"Caminho de arquivo inválido: {caminho!r}")
    return destino


def salvar_objeto(caminho: str, conteudo: bytes) -> str:
    destino = _resolver(caminho)
    if destino.exists():
        raise FileExistsError(f"Arquivo já existe no armazenamento: {caminho}")
    destino.parent.mkdir(parents=True, exist_ok=True)
    destino.write_bytes(conteudo)
    logger.info("Objeto salvo: %s (%d bytes)", caminho, len(conteudo))
    return caminho


def ler_objeto(caminho: str) -> bytes:
    return _resolver(caminho).read_bytes()


def remover_objeto(caminho: str) -> bool:
    destino = _resolver(caminho)
    if not destino.exists():
        logger.warning("Objeto não encontrado para remoção: %s", caminho)
        return False
    destino.unlink()
    return True


def _assinatura(caminho: str, expira: int) -> str:
    msg = f"{caminho}:{expira}".encode('utf-8')
    return hmac.new(STORAGE_SECRET.encode('utf-8'), msg, hashlib.sha256).hexdigest()


def gerar_url_assinada(caminho: str, validade_segundos: int = VALIDADE_DOWNLOAD, agora: Optional[float] = None) -> str:
    expira = int((agora if agora is not None else time.time()) + validade_segundos)
    query = urlencode({'expires': expira, 'token': _assinatura(caminho, expira)})
    return f"{_PREFIXO_URL}{quote(caminho)}?{query}"


def caminho_da_url(url: str) -> Optional[str]:
    """Extrai o caminho do objeto de uma URL assinada (sem checar validade)."""
    if not url or not url.startswith(_PREFIXO_URL):
        return None
    return unquote(urlparse(url).path.lstrip('/')) or None


def verificar_url_assinada(url: str, agora: Optional[float] = None) -> Optional[str]:
    """Retorna o caminho do objeto se a URL for autêntica e estiver no prazo; senão None."""
    caminho = caminho_da_url(url)
    if caminho is None:
        return None
    params = parse_qs(urlparse(url).query)
    try:
        expira = int(params['expires'][0])
        token = params['token'][0]
    except (KeyError, IndexError, ValueError):
        return None

    if not hmac.compare_digest(token, _assinatura(caminho, expira)):
        return None
    if (agora if agora is not None else time.time()) > expira:
        return None
    return caminho
