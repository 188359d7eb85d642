from datetime import date
from typing import List, Optional

import database as db
from services.geral_svc import parse_data

# Frequências aceitas na tela (PT) e no banco (EN)
MAPA_RECORRENCIA = {
    'diario': 'daily',
    'semanal': 'weekly',
    'mensal': 'monthly',
    'anual': 'yearly',
    'daily': 'daily',
    'weekly': 'weekly',
    'monthly': 'monthly',
    'yearly': 'yearly',
}


def normalizar_recorrencia(tipo: Optional[str]) -> Optional[str]:
    if not tipo:
        return None
    try:
        return MAPA_RECORRENCIA[tipo.strip().lower()]
    except KeyError:
        raise ValueError(f"Tipo de recorrência inválido: {tipo!r}")


def somar_meses(base: date, meses: int) -> date:
    """Avança 'meses' mantendo o dia, limitado ao último dia do mês (31/01 + 1 -> 28/02)."""
    total = base.month - 1 + meses
    return db._get_valid_date(base.year + total // 12, total % 12 + 1, base.day)


def gerar_parcelas(valor_total: float, primeiro_vencimento, total_parcelas: Optional[int] = 1) -> List[dict]:
    """
    Divide o valor em parcelas mensais.
    A divisão é feita em centavos e a sobra vai para a última parcela,
    então a soma das parcelas é sempre igual ao valor total.
    """
    total_parcelas = 1 if total_parcelas is None else int(total_parcelas)
    if total_parcelas < 1:
        raise ValueError("O número de parcelas deve ser pelo menos 1.")
    db._ensure_positive_number("Valor", valor_total)

    vencimento = parse_data(primeiro_vencimento)
    if vencimento is None:
        raise ValueError(f"Data de vencimento inválida: {primeiro_vencimento!r}")

    total_cents = db.to_cents(valor_total)
    if total_cents < total_parcelas:
        raise ValueError("Valor insuficiente para o número de parcelas informado.")
    base_cents = total_cents // total_parcelas
    sobra = total_cents - base_cents * total_parcelas

    parcelas = []
    for i in range(1, total_parcelas + 1):
        cents = base_cents + (sobra if i == total_parcelas else 0)
        parcelas.append({
            'installment_number': i,
            'total_installments': total_parcelas,
            'amount': db.from_cents(cents),
            'due_date': somar_meses(vencimento, i - 1),
        })
    return parcelas
