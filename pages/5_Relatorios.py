import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import relatorios_rps as rps
from services import geral_svc as g_svc

import streamlit as st
import plotly.express as px
import auth
import componentes as cmp
from datetime import date
from calendar import monthrange

st.set_page_config(page_title="Relatórios", layout="wide", page_icon="📈")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()

st.title("📈 Relatórios Financeiros")

TIPOS = {"Todos": 'all', "Somente Despesas": 'payable', "Somente Receitas": 'receivable'}

# ==============================================================================
# 1. FILTROS
# ==============================================================================
hoje = date.today()
with st.container(border=True):
    f1, f2, f3, f4 = st.columns(4)
    dt_ini = f1.date_input("De", value=hoje.replace(day=1), format="DD/MM/YYYY")
    dt_fim = f2.date_input("Até", value=hoje.replace(day=monthrange(hoje.year, hoje.month)[1]), format="DD/MM/YYYY")
    categoria = f3.selectbox("Categoria", ["Todas"] + rps.buscar_categorias())
    tipo = f4.selectbox("Tipo", list(TIPOS.keys()))

try:
    pagar, receber = rps.buscar_lancamentos(dt_ini, dt_fim, None if categoria == "Todas" else categoria, TIPOS[tipo])
except ValueError as e:
    st.error(str(e))
    st.stop()

# ==============================================================================
# 2. RESUMO
# ==============================================================================
resumo = rps.calcular_resumo(pagar, receber)
c1, c2, c3 = st.columns(3)
c1.metric("Total a Receber", g_svc.format_brl(resumo['total_receber']),
          delta=f"Recebido: {g_svc.format_brl(resumo['total_recebido'])}", delta_color="off")
c2.metric("Total a Pagar", g_svc.format_brl(resumo['total_pagar']),
          delta=f"Pago: {g_svc.format_brl(resumo['total_pago'])}", delta_color="off")
c3.metric("Saldo Previsto", g_svc.format_brl(resumo['saldo']),
          delta=f"Realizado: {g_svc.format_brl(resumo['saldo_realizado'])}",
          delta_color="normal" if resumo['saldo_realizado'] >= 0 else "inverse")

st.markdown("---")

# ==============================================================================
# 3. GRÁFICOS
# ==============================================================================
g1, g2 = st.columns(2)
with g1:
    st.subheader("Por Categoria")
    df_cat = rps.agrupar_por_categoria(pagar, receber)
    if df_cat.empty:
        st.info("Sem lançamentos no período.")
    else:
        df_long = df_cat.melt(id_vars='categoria', value_vars=['despesas', 'receitas'], var_name='tipo', value_name='total')
        fig_cat = px.bar(df_long, x='categoria', y='total', color='tipo', barmode='group',
                         color_discrete_map={'receitas': '#28a745', 'despesas': '#dc3545'},
                         labels={'total': 'Valor (R$)', 'categoria': 'Categoria', 'tipo': 'Tipo'})
        st.plotly_chart(fig_cat, use_container_width=True)

with g2:
    st.subheader("Tendência (6 meses)")
    df_tend = rps.tendencia_mensal()
    fig_tend = px.line(df_tend, x='mes', y=['receitas', 'despesas'], markers=True,
                       color_discrete_map={'receitas': '#28a745', 'despesas': '#dc3545'},
                       labels={'value': 'Valor (R$)', 'mes': 'Mês', 'variable': 'Tipo'})
    st.plotly_chart(fig_tend, use_container_width=True)

# ==============================================================================
# 4. LANÇAMENTOS E EXPORTAÇÃO
# ==============================================================================
st.subheader("Lançamentos do Período")
tabela = rps.montar_tabela_exportacao(pagar, receber)
if tabela.empty:
    st.info("Nenhum lançamento encontrado com estes filtros.")
else:
    exibicao = tabela.copy()
    exibicao['Vencimento'] = exibicao['Vencimento'].apply(g_svc.formata_data)
    exibicao['Status'] = exibicao['Status'].apply(cmp.status_visual)
    st.dataframe(exibicao, hide_index=True, use_container_width=True)

    e1, e2 = st.columns(2)
    if e1.download_button("📥 Exportar CSV", data=rps.gerar_csv(pagar, receber),
                          file_name=rps.nome_arquivo_csv(dt_ini, dt_fim), mime="text/csv"):
        auth.registrar_acao('download', 'system', None, {'relatorio': 'csv', 'inicio': dt_ini, 'fim': dt_fim})
    if e2.download_button("📄 Exportar PDF", data=rps.gerar_pdf(pagar, receber, dt_ini, dt_fim),
                          file_name=rps.nome_arquivo_csv(dt_ini, dt_fim).replace('.csv', '.pdf'),
                          mime="application/pdf"):
        auth.registrar_acao('download', 'system', None, {'relatorio': 'pdf', 'inicio': dt_ini, 'fim': dt_fim})
