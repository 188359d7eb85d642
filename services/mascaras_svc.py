"""Máscaras de digitação e validação de documentos brasileiros (CPF/CNPJ), telefone e moeda.

Todas as funções são puras: entradas malformadas ou incompletas geram uma string
parcialmente formatada (máscaras) ou False (validações), nunca exceções.
"""

import re
from typing import Optional

from services.geral_svc import format_brl

_NAO_DIGITO = re.compile(r'\D')
_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

PESOS_CNPJ_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
PESOS_CNPJ_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]


def _digitos(value: Optional[str]) -> str:
    if value is None:
        return ""
    return _NAO_DIGITO.sub('', str(value))


def _pontuar(digitos: str, cortes, separadores) -> str:
    """Insere cada separador antes do bloco correspondente, só se o bloco já tiver dígitos."""
    resultado = digitos[:cortes[0]]
    for i, sep in enumerate(separadores):
        inicio = cortes[i]
        fim = cortes[i + 1] if i + 1 < len(cortes) else len(digitos)
        bloco = digitos[inicio:fim]
        if not bloco:
            break
        resultado += sep + bloco
    return resultado


# --- MÁSCARAS ---

def mask_cpf(value: Optional[str]) -> str:
    """'12345678901' -> '123.456.789-01' (progressivo: '1234' -> '123.4')."""
    numeros = _digitos(value)[:11]
    return _pontuar(numeros, [3, 6, 9], ['.', '.', '-'])


def mask_cnpj(value: Optional[str]) -> str:
    """'11444777000161' -> '11.444.777/0001-61'."""
    numeros = _digitos(value)[:14]
    return _pontuar(numeros, [2, 5, 8, 12], ['.', '.', '/', '-'])


def mask_phone(value: Optional[str]) -> str:
    """Fixo (até 10 dígitos): (DD) NNNN-NNNN. Celular (11 dígitos): (DD) NNNNN-NNNN."""
    numeros = _digitos(value)[:11]
    if len(numeros) <= 2:
        return numeros
    ddd, resto = numeros[:2], numeros[2:]
    tamanho_prefixo = 4 if len(numeros) <= 10 else 5
    prefixo, sufixo = resto[:tamanho_prefixo], resto[tamanho_prefixo:]
    return f"({ddd}) {prefixo}" + (f"-{sufixo}" if sufixo else "")


def mask_currency(value: Optional[str]) -> str:
    """Trata os dígitos como centavos: '123456' -> 'R$ 1.234,56'."""
    return format_brl(unmask_currency(value))


def unmask_currency(value: Optional[str]) -> float:
    numeros = _digitos(value)
    return int(numeros or '0') / 100


def unmask_document(value: Optional[str]) -> str:
    return _digitos(value)


def mask_document(value: Optional[str], tipo: str) -> str:
    return mask_cpf(value) if tipo == 'cpf' else mask_cnpj(value)


# --- VALIDAÇÕES ---

def _todos_iguais(numeros: str) -> bool:
    return numeros == numeros[0] * len(numeros)


def validate_cpf(value: Optional[str]) -> bool:
    numeros = _digitos(value)
    if len(numeros) != 11 or _todos_iguais(numeros):
        return False

    for posicao in (9, 10):
        soma = sum(int(numeros[i]) * (posicao + 1 - i) for i in range(posicao))
        resto = (soma * 10) % 11
        if resto in (10, 11):
            resto = 0
        if resto != int(numeros[posicao]):
            return False
    return True


def validate_cnpj(value: Optional[str]) -> bool:
    numeros = _digitos(value)
    if len(numeros) != 14 or _todos_iguais(numeros):
        return False

    for posicao, pesos in ((12, PESOS_CNPJ_1), (13, PESOS_CNPJ_2)):
        soma = sum(int(numeros[i]) * pesos[i] for i in range(posicao))
        resto = soma % 11
        digito = 0 if resto < 2 else 11 - resto
        if digito != int(numeros[posicao]):
            return False
    return True


def validate_document(value: Optional[str], tipo: str) -> bool:
    return validate_cpf(value) if tipo == 'cpf' else validate_cnpj(value)


def validate_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_EMAIL_RE.fullmatch(value))
