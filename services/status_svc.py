"""Status efetivo das contas (a pagar / a receber).

O status gravado no banco só muda em ações explícitas (pagamento, renegociação);
a passagem do vencimento é silenciosa. Por isso o status exibido é sempre
recalculado na leitura e nunca gravado.
"""

from datetime import date
from typing import Optional

import pandas as pd

from services.geral_svc import parse_data

STATUS_LABELS = {
    'a_vencer': 'A Vencer',
    'vencida': 'Vencida',
    'paga': 'Paga',
    'renegociada': 'Renegociada',
}

STATUS_FINAIS = ('paga', 'renegociada')


def calculate_effective_status(stored_status: str, due_date, hoje: Optional[date] = None) -> str:
    if stored_status in STATUS_FINAIS:
        return stored_status

    vencimento = parse_data(due_date)
    if vencimento is None:
        return 'a_vencer'

    hoje = hoje or date.today()
    if vencimento < hoje:
        return 'vencida'
    return 'a_vencer'


def aplicar_status_efetivo(df: pd.DataFrame, hoje: Optional[date] = None) -> pd.DataFrame:
    """Adiciona a coluna 'status_efetivo' a um DataFrame com colunas 'status' e 'due_date'."""
    if df.empty:
        df['status_efetivo'] = pd.Series(dtype=str)
        return df
    df['status_efetivo'] = [
        calculate_effective_status(s, d, hoje) for s, d in zip(df['status'], df['due_date'])
    ]
    return df


def label_status(status: str) -> str:
    return STATUS_LABELS.get(status, status)
