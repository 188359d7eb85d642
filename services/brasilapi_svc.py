import logging
from typing import Optional

import requests

from services.mascaras_svc import unmask_document

logger = logging.getLogger(__name__)

BRASILAPI_URL = "https://brasilapi.com.br/api/cnpj/v1/{cnpj}"
_TIMEOUT = 10


def consultar_cnpj(cnpj: str) -> Optional[dict]:
    """
    Consulta dados cadastrais de um CNPJ na BrasilAPI.
    Retorna None se o CNPJ não tiver 14 dígitos, não existir ou a consulta falhar.
    """
    numeros = unmask_document(cnpj)
    if len(numeros) != 14:
        return None

    try:
        resp = requests.get(BRASILAPI_URL.format(cnpj=numeros), timeout=_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Erro de conexão ao consultar CNPJ %s: %s", numeros, e)
        return None

    if resp.status_code == 404:
        logger.info("CNPJ %s não encontrado na BrasilAPI", numeros)
        return None
    if not resp.ok:
        logger.error("BrasilAPI respondeu %s para o CNPJ %s", resp.status_code, numeros)
        return None

    data = resp.json()
    return {
        'cnpj': data.get('cnpj') or numeros,
        'razao_social': data.get('razao_social') or '',
        'nome_fantasia': data.get('nome_fantasia') or '',
        'logradouro': data.get('logradouro') or '',
        'numero': data.get('numero') or '',
        'complemento': data.get('complemento') or '',
        'bairro': data.get('bairro') or '',
        'municipio': data.get('municipio') or '',
        'uf': data.get('uf') or '',
        'cep': data.get('cep') or '',
        'email': data.get('email') or '',
        'telefone': data.get('ddd_telefone_1') or '',
    }
