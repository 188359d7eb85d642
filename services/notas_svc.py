"""Agrupamento das parcelas de notas fiscais de fornecedor.

Cada linha de supplier_invoices é uma parcela; parcelas com o mesmo número de nota
formam uma única nota lógica, exibida como linha-pai com as parcelas como filhas.
"""

from typing import Dict, List, Union

import pandas as pd


def _valor(parcela: dict) -> float:
    valor = parcela.get('amount')
    if valor is None or pd.isna(valor):
        return 0.0
    return float(valor)


def _ordem_parcela(parcela: dict):
    numero = parcela.get('installment_number')
    if numero is None or pd.isna(numero):
        return (1, 0)
    return (0, int(numero))


def group_invoices_by_number(installments: Union[List[dict], pd.DataFrame]) -> List[dict]:
    """Agrupa parcelas por invoice_number, somando os valores.

    Descrição do produto, data de emissão e fornecedor vêm da primeira parcela
    encontrada do grupo. As parcelas de cada grupo saem ordenadas por
    installment_number; a ordem dos grupos é a da primeira aparição.
    """
    if isinstance(installments, pd.DataFrame):
        installments = installments.to_dict(orient="records")

    grupos: Dict[str, dict] = {}
    for parcela in installments:
        numero = parcela.get('invoice_number')
        grupo = grupos.get(numero)
        if grupo is None:
            grupo = {
                'invoice_number': numero,
                'supplier_id': parcela.get('supplier_id'),
                'product_description': parcela.get('product_description'),
                'issue_date': parcela.get('issue_date'),
                'total_amount': 0.0,
                'installments': [],
            }
            grupos[numero] = grupo
        grupo['total_amount'] += _valor(parcela)
        grupo['installments'].append(parcela)

    resultado = []
    for grupo in grupos.values():
        grupo['installments'].sort(key=_ordem_parcela)
        grupo['total_amount'] = round(grupo['total_amount'], 2)
        grupo['quantidade'] = len(grupo['installments'])
        # Uma parcela só: linha simples. Mais de uma: linha expansível.
        grupo['expansivel'] = grupo['quantidade'] > 1
        resultado.append(grupo)
    return resultado


def ordenar_grupos(grupos: List[dict]) -> List[dict]:
    """Ordena as notas pela data de emissão, da mais recente para a mais antiga."""
    return sorted(grupos, key=lambda g: str(g.get('issue_date') or ''), reverse=True)
