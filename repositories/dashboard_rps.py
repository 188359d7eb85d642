from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd

from repositories import contas_rps
from services import parcelas_svc as parc

MESES_ABREV = ['Jan', 'Fev', 'Mar', 'Abr', 'Mai', 'Jun', 'Jul', 'Ago', 'Set', 'Out', 'Nov', 'Dez']
PENDENTES = ('a_vencer', 'vencida')


def inicio_mes(ref: date, meses_atras: int = 0) -> date:
    return parc.somar_meses(ref.replace(day=1), -meses_atras)


def _valor_realizado(df: pd.DataFrame, coluna_pago: str) -> pd.Series:
    """Valor efetivamente pago/recebido; sem registro do valor, usa o valor da conta."""
    return df[coluna_pago].where(df[coluna_pago].notna() & (df[coluna_pago] > 0), df['amount'])


def _realizado_no_periodo(df: pd.DataFrame, coluna_pago: str, inicio: date, fim: date) -> float:
    if df.empty:
        return 0.0
    datas = pd.to_datetime(df['payment_date'], errors='coerce')
    filtro = (df['status'] == 'paga') & (datas >= pd.Timestamp(inicio)) & (datas < pd.Timestamp(fim))
    return float(_valor_realizado(df[filtro], coluna_pago).sum())


def _variacao(atual: float, anterior: float) -> float:
    if anterior <= 0:
        return 0.0
    return round((atual - anterior) / anterior * 100, 1)


def buscar_resumo(hoje: Optional[date] = None) -> Dict[str, float]:
    """
    Indicadores do topo do painel. Pendências e atrasos usam o status efetivo,
    então uma conta gravada como 'a_vencer' com vencimento passado já conta como vencida.
    """
    hoje = hoje or date.today()
    pagar = contas_rps.buscar_contas('pagar', hoje=hoje)
    receber = contas_rps.buscar_contas('receber', hoje=hoje)

    pend_pagar = pagar[pagar['status_efetivo'].isin(PENDENTES)]
    pend_receber = receber[receber['status_efetivo'].isin(PENDENTES)]
    venc_pagar = pagar[pagar['status_efetivo'] == 'vencida']
    venc_receber = receber[receber['status_efetivo'] == 'vencida']

    inicio_atual = inicio_mes(hoje)
    inicio_prox = parc.somar_meses(inicio_atual, 1)
    inicio_ant = inicio_mes(hoje, 1)

    receita_mes = _realizado_no_periodo(receber, 'received_amount', inicio_atual, inicio_prox)
    despesa_mes = _realizado_no_periodo(pagar, 'paid_amount', inicio_atual, inicio_prox)
    receita_ant = _realizado_no_periodo(receber, 'received_amount', inicio_ant, inicio_atual)
    despesa_ant = _realizado_no_periodo(pagar, 'paid_amount', inicio_ant, inicio_atual)

    return {
        'total_pagar': float(pend_pagar['amount'].sum()),
        'total_receber': float(pend_receber['amount'].sum()),
        'qtd_pagar': len(pend_pagar),
        'qtd_receber': len(pend_receber),
        'total_vencido': float(venc_pagar['amount'].sum() + venc_receber['amount'].sum()),
        'qtd_vencido': len(venc_pagar) + len(venc_receber),
        'receita_mes': receita_mes,
        'despesa_mes': despesa_mes,
        'variacao_receita': _variacao(receita_mes, receita_ant),
        'variacao_despesa': _variacao(despesa_mes, despesa_ant),
    }


def buscar_grafico_mensal(hoje: Optional[date] = None, meses: int = 6) -> pd.DataFrame:
    """Receitas recebidas x despesas pagas por mês (pela data de pagamento), do mais antigo ao atual."""
    hoje = hoje or date.today()
    pagar = contas_rps.buscar_contas('pagar', hoje=hoje)
    receber = contas_rps.buscar_contas('receber', hoje=hoje)

    linhas = []
    for i in range(meses - 1, -1, -1):
        inicio = inicio_mes(hoje, i)
        fim = parc.somar_meses(inicio, 1)
        linhas.append({
            'mes': f"{MESES_ABREV[inicio.month - 1]}/{inicio.year % 100:02d}",
            'receitas': _realizado_no_periodo(receber, 'received_amount', inicio, fim),
            'despesas': _realizado_no_periodo(pagar, 'paid_amount', inicio, fim),
        })
    return pd.DataFrame(linhas, columns=['mes', 'receitas', 'despesas'])


def buscar_alertas(hoje: Optional[date] = None, dias: int = 7, limite: int = 8) -> List[dict]:
    """
    Alertas do painel, nesta ordem: contas a pagar vencidas (até 5), a pagar que vencem
    nos próximos 'dias' (até 5) e recebimentos atrasados (até 3).
    """
    hoje = hoje or date.today()
    limite_data = hoje + timedelta(days=dias)
    pagar = contas_rps.buscar_contas('pagar', hoje=hoje)
    receber = contas_rps.buscar_contas('receber', hoje=hoje)

    alertas = []
    for _, c in pagar[pagar['status_efetivo'] == 'vencida'].head(5).iterrows():
        alertas.append({'tipo': 'danger', 'titulo': 'Conta Vencida', 'descricao': c['description'],
                        'valor': c['amount'], 'vencimento': c['due_date']})

    vencimentos = pd.to_datetime(pagar['due_date'], errors='coerce')
    proximas = pagar[(pagar['status_efetivo'] == 'a_vencer')
                     & (vencimentos >= pd.Timestamp(hoje)) & (vencimentos <= pd.Timestamp(limite_data))]
    for _, c in proximas.head(5).iterrows():
        alertas.append({'tipo': 'warning', 'titulo': 'Vencimento Próximo', 'descricao': c['description'],
                        'valor': c['amount'], 'vencimento': c['due_date']})

    for _, c in receber[receber['status_efetivo'] == 'vencida'].head(3).iterrows():
        alertas.append({'tipo': 'warning', 'titulo': 'Recebimento Atrasado',
                        'descricao': f"{c['description']} - {c['customer_name']}",
                        'valor': c['amount'], 'vencimento': c['due_date']})

    return alertas[:limite]


def buscar_proximas_contas(tipo: str, hoje: Optional[date] = None, limite: int = 5) -> pd.DataFrame:
    """Próximas contas em aberto (por vencimento) para as tabelas do painel."""
    df = contas_rps.buscar_contas(tipo, hoje=hoje)
    df = df[df['status_efetivo'].isin(PENDENTES)]
    colunas = ['id', 'description', 'supplier_name' if tipo == 'pagar' else 'customer_name',
               'amount', 'due_date', 'status_efetivo']
    return df[colunas].head(limite).reset_index(drop=True)
