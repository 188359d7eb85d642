import csv
from datetime import date
from typing import Optional, Tuple

import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from repositories import contas_rps
from repositories.dashboard_rps import MESES_ABREV, inicio_mes
from services import parcelas_svc as parc
from services.geral_svc import format_brl, formata_data, parse_data

TIPOS_RELATORIO = ('all', 'payable', 'receivable')
SEM_CATEGORIA = 'Sem categoria'
COLUNAS_CSV = ['Tipo', 'Descrição', 'Valor', 'Vencimento', 'Pagamento', 'Status', 'Categoria', 'Entidade']


def _no_periodo(df: pd.DataFrame, inicio: date, fim: date) -> pd.Series:
    vencimentos = pd.to_datetime(df['due_date'], errors='coerce')
    return (vencimentos >= pd.Timestamp(inicio)) & (vencimentos <= pd.Timestamp(fim))


def buscar_lancamentos(data_inicio, data_fim, categoria: Optional[str] = None, tipo: str = 'all',
                       hoje: Optional[date] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Contas a pagar e a receber com vencimento dentro do período (inclusive) e da categoria.
    categoria None ou 'all' não filtra. O tipo 'payable'/'receivable' zera a outra lista.
    """
    if tipo not in TIPOS_RELATORIO:
        raise ValueError(f"Tipo de relatório inválido: {tipo!r}")
    inicio, fim = parse_data(data_inicio), parse_data(data_fim)
    if inicio is None or fim is None:
        raise ValueError("Informe o período do relatório.")
    if inicio > fim:
        raise ValueError("A data inicial deve ser anterior à data final.")

    resultado = []
    for t, tipo_relatorio in (('pagar', 'payable'), ('receber', 'receivable')):
        df = contas_rps.buscar_contas(t, hoje=hoje)
        if tipo not in ('all', tipo_relatorio):
            df = df.iloc[0:0]
        filtro = _no_periodo(df, inicio, fim)
        if categoria and categoria != 'all':
            filtro &= df['category'] == categoria
        resultado.append(df[filtro].sort_values('due_date', ascending=False).reset_index(drop=True))
    return resultado[0], resultado[1]


def _realizado(df: pd.DataFrame, coluna_pago: str) -> float:
    pagas = df[df['status'] == 'paga']
    valores = pagas[coluna_pago].where(pagas[coluna_pago].notna() & (pagas[coluna_pago] > 0), pagas['amount'])
    return float(valores.sum())


def calcular_resumo(pagar: pd.DataFrame, receber: pd.DataFrame) -> dict:
    total_pagar = float(pagar['amount'].sum())
    total_receber = float(receber['amount'].sum())
    total_pago = _realizado(pagar, 'paid_amount')
    total_recebido = _realizado(receber, 'received_amount')
    return {
        'total_pagar': total_pagar,
        'total_receber': total_receber,
        'total_pago': total_pago,
        'total_recebido': total_recebido,
        'saldo': total_receber - total_pagar,
        'saldo_realizado': total_recebido - total_pago,
    }


def agrupar_por_categoria(pagar: pd.DataFrame, receber: pd.DataFrame) -> pd.DataFrame:
    """Totais por categoria (despesas x receitas); contas sem categoria caem em 'Sem categoria'."""
    desp = pagar.assign(categoria=pagar['category'].fillna(SEM_CATEGORIA)).groupby('categoria')['amount'].sum()
    rec = receber.assign(categoria=receber['category'].fillna(SEM_CATEGORIA)).groupby('categoria')['amount'].sum()
    df = pd.concat([desp.rename('despesas'), rec.rename('receitas')], axis=1).fillna(0.0)
    df.index.name = 'categoria'
    return df.reset_index().sort_values('categoria').reset_index(drop=True)


def tendencia_mensal(hoje: Optional[date] = None, meses: int = 6) -> pd.DataFrame:
    """Valores lançados por mês de vencimento nos últimos meses (sem os filtros da tela)."""
    hoje = hoje or date.today()
    pagar = contas_rps.buscar_contas('pagar', hoje=hoje)
    receber = contas_rps.buscar_contas('receber', hoje=hoje)
    venc_p = pd.to_datetime(pagar['due_date'], errors='coerce')
    venc_r = pd.to_datetime(receber['due_date'], errors='coerce')

    linhas = []
    for i in range(meses - 1, -1, -1):
        inicio = inicio_mes(hoje, i)
        fim = parc.somar_meses(inicio, 1)
        linhas.append({
            'mes': f"{MESES_ABREV[inicio.month - 1]}/{inicio.year % 100:02d}",
            'despesas': float(pagar.loc[(venc_p >= pd.Timestamp(inicio)) & (venc_p < pd.Timestamp(fim)), 'amount'].sum()),
            'receitas': float(receber.loc[(venc_r >= pd.Timestamp(inicio)) & (venc_r < pd.Timestamp(fim)), 'amount'].sum()),
        })
    return pd.DataFrame(linhas, columns=['mes', 'despesas', 'receitas'])


def buscar_categorias():
    return contas_rps.buscar_categorias()


def _texto(valor) -> str:
    if valor is None or (isinstance(valor, float) and pd.isna(valor)) or valor == '':
        return '-'
    return str(valor)


def montar_tabela_exportacao(pagar: pd.DataFrame, receber: pd.DataFrame) -> pd.DataFrame:
    linhas = []
    for _, c in pagar.iterrows():
        linhas.append(['Despesa', c['description'], f"{c['amount']:.2f}", c['due_date'], _texto(c['payment_date']),
                       c['status_efetivo'], _texto(c['category']), _texto(c.get('supplier_name'))])
    for _, c in receber.iterrows():
        linhas.append(['Receita', c['description'], f"{c['amount']:.2f}", c['due_date'], _texto(c['payment_date']),
                       c['status_efetivo'], _texto(c['category']), c['customer_name']])
    return pd.DataFrame(linhas, columns=COLUNAS_CSV)


def gerar_csv(pagar: pd.DataFrame, receber: pd.DataFrame) -> bytes:
    """CSV com BOM UTF-8 (abre com acentos corretos no Excel)."""
    texto = montar_tabela_exportacao(pagar, receber).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
    return ('\ufeff' + texto).encode('utf-8')


def nome_arquivo_csv(data_inicio, data_fim) -> str:
    return f"relatorio_{parse_data(data_inicio).isoformat()}_{parse_data(data_fim).isoformat()}.csv"


# ==============================================================================
# PDF
# ==============================================================================
class PDFRelatorioFinanceiro(FPDF):
    def __init__(self, titulo: str):
        super().__init__(orientation='L', format='A4')
        self.titulo = titulo

    def header(self):
        self.set_font('Helvetica', 'B', 12)
        self.cell(0, 10, self.titulo, border=0, align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(2)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 10, f'Pág {self.page_no()}/{{nb}}', border=0, align='C')


_LARGURAS_PDF = (22, 80, 30, 25, 25, 25, 35, 35)


def gerar_pdf(pagar: pd.DataFrame, receber: pd.DataFrame, data_inicio, data_fim) -> bytes:
    """Resumo do período e a lista de lançamentos, no mesmo recorte do CSV."""
    resumo = calcular_resumo(pagar, receber)
    pdf = PDFRelatorioFinanceiro(f"Relatório Financeiro - {formata_data(data_inicio)} a {formata_data(data_fim)}")
    pdf.alias_nb_pages()
    pdf.add_page()

    pdf.set_font('Helvetica', '', 10)
    for rotulo, chave in (("Total a pagar", 'total_pagar'), ("Total a receber", 'total_receber'),
                          ("Total pago", 'total_pago'), ("Total recebido", 'total_recebido'),
                          ("Saldo previsto", 'saldo'), ("Saldo realizado", 'saldo_realizado')):
        pdf.cell(60, 6, rotulo, border=0)
        pdf.cell(40, 6, format_brl(resumo[chave]), border=0, align='R', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    tabela = montar_tabela_exportacao(pagar, receber)
    pdf.set_font('Helvetica', 'B', 8)
    pdf.set_fill_color(220, 220, 220)
    for largura, titulo in zip(_LARGURAS_PDF, COLUNAS_CSV):
        pdf.cell(largura, 7, titulo, border=1, fill=True)
    pdf.ln()

    pdf.set_font('Helvetica', '', 8)
    for linha in tabela.itertuples(index=False):
        for largura, valor in zip(_LARGURAS_PDF, linha):
            texto = str(valor).encode('latin-1', 'replace').decode('latin-1')
            limite = int(largura / 1.8)
            pdf.cell(largura, 6, texto[:limite - 3] + '...' if len(texto) > limite else texto, border=1)
        pdf.ln()
    return bytes(pdf.output())
