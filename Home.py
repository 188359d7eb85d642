from services import geral_svc as g_svc
from services import status_svc as sts
from repositories import dashboard_rps as rps
from repositories import funcionarios_rps as func_rps

import streamlit as st
import plotly.express as px
import auth

# 1. Configuração Inicial
st.set_page_config(page_title="Dashboard", layout="wide", page_icon="📊")

if not auth.validar_sessao():
    auth.tela_login()
    st.stop()

auth.barra_lateral()

# 2. Estilos CSS
st.markdown("""
    <style>
        div[data-testid="stMetricValue"] { font-size: 1.8rem; }
        hr { margin: 5px 0px; opacity: 0.1; }
    </style>
""", unsafe_allow_html=True)

st.title("📊 Dashboard")
st.caption("Visão geral das contas, alertas de vencimento e movimentação dos últimos meses.")
st.markdown("---")

try:
    resumo = rps.buscar_resumo()
    df_graf = rps.buscar_grafico_mensal()
    alertas = rps.buscar_alertas()
except Exception as e:
    st.error(f"Erro ao carregar o painel: {e}")
    st.stop()

# --- CARDS ---
c1, c2, c3, c4 = st.columns(4)
c1.metric("A Pagar", g_svc.format_brl(resumo['total_pagar']), delta=f"{resumo['qtd_pagar']} contas em aberto",
          delta_color="off")
c2.metric("A Receber", g_svc.format_brl(resumo['total_receber']), delta=f"{resumo['qtd_receber']} contas em aberto",
          delta_color="off")
c3.metric("Vencido", g_svc.format_brl(resumo['total_vencido']), delta=f"{resumo['qtd_vencido']} contas",
          delta_color="inverse" if resumo['qtd_vencido'] else "off")
saldo_mes = resumo['receita_mes'] - resumo['despesa_mes']
c4.metric("Saldo do Mês", g_svc.format_brl(saldo_mes), delta_color="normal" if saldo_mes >= 0 else "inverse")

k1, k2, k3 = st.columns(3)
k1.metric("Recebido no Mês", g_svc.format_brl(resumo['receita_mes']), delta=f"{resumo['variacao_receita']:+.1f}% vs. mês anterior")
k2.metric("Pago no Mês", g_svc.format_brl(resumo['despesa_mes']), delta=f"{resumo['variacao_despesa']:+.1f}% vs. mês anterior",
          delta_color="inverse")
ativos = func_rps.contar_por_status()
k3.metric("Equipe Ativa", f"{ativos['active']} Colab.", delta=f"{ativos['vacation']} em férias", delta_color="off")

st.markdown("---")

# --- GRÁFICO + ALERTAS ---
col_graf, col_alertas = st.columns([2, 1])

with col_graf:
    st.subheader("📈 Receitas vs. Despesas (6 meses)")
    if df_graf[['receitas', 'despesas']].to_numpy().sum() > 0:
        df_long = df_graf.melt(id_vars='mes', value_vars=['receitas', 'despesas'], var_name='tipo', value_name='total')
        fig = px.bar(
            df_long, x='mes', y='total', color='tipo', barmode='group',
            color_discrete_map={'receitas': '#28a745', 'despesas': '#dc3545'},
            labels={'total': 'Valor (R$)', 'mes': 'Mês', 'tipo': 'Tipo'}
        )
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("Nenhum pagamento ou recebimento registrado nos últimos meses.")

with col_alertas:
    st.subheader("🔔 Alertas")
    if not alertas:
        st.success("Nenhuma pendência urgente.")
    for a in alertas:
        texto = f"**{a['titulo']}** · {a['descricao']}  \n{g_svc.format_brl(a['valor'])} · vence {g_svc.formata_data(a['vencimento'])}"
        if a['tipo'] == 'danger':
            st.error(texto, icon="🚨")
        else:
            st.warning(texto, icon="⚠️")

st.markdown("### 📅 Próximos Vencimentos")
col_l, col_r = st.columns(2)

for coluna, tipo, titulo, campo_nome in (
    (col_l, 'receber', "A Receber", 'customer_name'),
    (col_r, 'pagar', "A Pagar", 'supplier_name'),
):
    with coluna:
        st.markdown(f"**{titulo}**")
        st.divider()
        df = rps.buscar_proximas_contas(tipo)
        if df.empty:
            st.success("Nada em aberto!")
            continue

        h1, h2, h3, h4 = st.columns([1.5, 3, 2, 1.5])
        h1.caption("Vencimento")
        h2.caption("Descrição")
        h3.caption("Valor")
        h4.caption("Status")
        for _, row in df.iterrows():
            r1, r2, r3, r4 = st.columns([1.5, 3, 2, 1.5])
            r1.markdown(g_svc.get_status_visual(row['due_date']))
            r2.write(f"{row['description']} ({row[campo_nome] or '-'})")
            r3.write(g_svc.format_brl(row['amount']))
            r4.write(sts.label_status(row['status_efetivo']))
            st.markdown("<hr>", unsafe_allow_html=True)
