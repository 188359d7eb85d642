import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import logs_rps as rps

import streamlit as st
import pandas as pd
import auth

st.set_page_config(page_title="Logs do Sistema", layout="wide", page_icon="📜")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()
auth.exigir_papel('admin')

st.title("📜 Logs do Sistema")
st.caption("Acompanhe todas as ações realizadas no sistema.")

f1, f2, f3, f4 = st.columns([2, 2, 1, 1])
entidade = f1.selectbox("Entidade", ["all"] + list(rps.ENTIDADES),
                        format_func=lambda e: "Todas" if e == "all" else rps.ENTIDADES_LABELS.get(e, e))
status = f2.selectbox("Status", ["all", "success", "error"],
                      format_func=lambda s: {"all": "Todos", "success": "Sucesso", "error": "Erro"}[s])
limite = f3.number_input("Limite", min_value=10, max_value=1000, value=200, step=50)
f4.write("")
if f4.button("🔄 Atualizar"):
    st.rerun()

df = rps.buscar_logs(None if entidade == "all" else entidade, None if status == "all" else status, limite)

if df.empty:
    st.info("Nenhum log encontrado.")
    st.stop()

exibicao = pd.DataFrame({
    'Data/Hora': pd.to_datetime(df['created_at'], errors='coerce').dt.strftime('%d/%m/%Y %H:%M:%S'),
    'Usuário': df['user_name'],
    'Ação': df['action'].map(lambda a: rps.ACOES_LABELS.get(a, a)),
    'Entidade': df['entity_type'].map(lambda e: rps.ENTIDADES_LABELS.get(e, e)),
    'ID': df['entity_id'].fillna('-'),
    'Status': df['status'].map(lambda s: "✅ Sucesso" if s == 'success' else "❌ Erro"),
})
st.dataframe(exibicao, hide_index=True, use_container_width=True)

st.markdown("---")
log_id = st.selectbox("Ver detalhes do log:", df['id'].tolist(),
                      format_func=lambda x: f"#{x} · {df.loc[df['id'] == x, 'action'].values[0]}")
detalhes = rps.detalhes_do_log(df.loc[df['id'] == log_id, 'details'].values[0])
st.json(detalhes)
