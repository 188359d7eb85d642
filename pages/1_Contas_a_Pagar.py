import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import contas_rps as rps
from repositories import fornecedores_rps as forn_rps
from services import geral_svc as g_svc
from services import status_svc as sts

import streamlit as st
import auth
import componentes as cmp
from datetime import date

st.set_page_config(page_title="Contas a Pagar", layout="wide", page_icon="🧾")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()

st.title("🧾 Contas a Pagar")

df_forn = forn_rps.buscar_fornecedores(apenas_ativos=True)
map_fornecedores = dict(zip(df_forn['id'].tolist(), df_forn['name'].tolist()))

tab1, tab2 = st.tabs(["📋 Contas", "➕ Nova Conta"])

# ==============================================================================
# ABA 1: LISTAGEM E AÇÕES
# ==============================================================================
with tab1:
    df_todas = rps.buscar_contas('pagar')

    m1, m2, m3 = st.columns(3)
    for col, status, titulo in ((m1, 'a_vencer', "A Vencer"), (m2, 'vencida', "Vencidas"), (m3, 'paga', "Pagas")):
        sel = df_todas[df_todas['status_efetivo'] == status]
        col.metric(titulo, g_svc.format_brl(sel['amount'].sum()), delta=f"{len(sel)} contas", delta_color="off")

    cf1, cf2 = st.columns([2, 2])
    filtro = cf1.radio("Status:", list(cmp.FILTROS_STATUS.keys()), horizontal=True)
    busca = cf2.text_input("🔍 Buscar (descrição ou fornecedor)")

    df = rps.buscar_contas('pagar', status=cmp.FILTROS_STATUS[filtro])
    if busca:
        termo = busca.strip().lower()
        df = df[df['description'].str.lower().str.contains(termo, regex=False)
                | df['supplier_name'].fillna('').str.lower().str.contains(termo, regex=False)]

    if df.empty:
        st.info("Nenhuma conta encontrada.")
    else:
        cmp.tabela_contas(df, 'pagar')

        st.markdown("---")
        conta_id = st.selectbox(
            "Selecione uma conta para ver detalhes:",
            df['id'].tolist(),
            format_func=lambda x: f"#{x} · {df.loc[df['id'] == x, 'description'].values[0]}"
        )
        conta = rps.buscar_detalhe_conta('pagar', int(conta_id))

        if conta:
            st.markdown(f"### {conta['description']}")
            d1, d2, d3, d4 = st.columns(4)
            d1.metric("Valor", g_svc.format_brl(conta['amount']))
            d2.metric("Vencimento", g_svc.formata_data(conta['due_date']))
            d3.metric("Status", cmp.status_visual(conta['status_efetivo']))
            d4.metric("Fornecedor", map_fornecedores.get(conta['supplier_id'], '-'))
            if conta.get('parent_id'):
                st.caption(f"Renegociação da conta #{conta['parent_id']} "
                           f"(vencimento original {g_svc.formata_data(conta['original_due_date'])})")
            if conta['tags']:
                st.caption("🏷️ " + ", ".join(conta['tags']))
            if conta.get('notes'):
                st.caption(f"📝 {conta['notes']}")

            # Edição (somente contas avulsas, não vindas de nota fiscal)
            if auth.pode_editar() and not conta['is_from_invoice'] and conta['status'] not in sts.STATUS_FINAIS:
                with st.expander("✏️ Editar conta"):
                    with st.form(f"edit_pagar_{conta_id}"):
                        e1, e2 = st.columns(2)
                        n_desc = e1.text_input("Descrição", value=conta['description'])
                        ids_forn = list(map_fornecedores.keys())
                        n_forn = e2.selectbox("Fornecedor", ids_forn, format_func=lambda x: map_fornecedores[x],
                                              index=ids_forn.index(conta['supplier_id']) if conta['supplier_id'] in ids_forn else 0)
                        e3, e4, e5 = st.columns(3)
                        n_valor = e3.number_input("Valor (R$)", min_value=0.01, value=float(conta['amount']), step=10.0)
                        n_venc = e4.date_input("Vencimento", value=g_svc.parse_data(conta['due_date']), format="DD/MM/YYYY")
                        n_cat = e5.text_input("Categoria", value=conta['category'] or "")
                        n_tags = cmp.seletor_tags("Tags", 'payable', key=f"tags_edit_pagar_{conta_id}", default=conta['tags'])
                        n_obs = st.text_area("Observações", value=conta['notes'] or "")
                        if st.form_submit_button("💾 Salvar Alterações"):
                            try:
                                rps.atualizar_conta('pagar', int(conta_id), description=n_desc, supplier_id=n_forn,
                                                    amount=n_valor, due_date=n_venc, category=n_cat or None,
                                                    tags=n_tags, notes=n_obs or None)
                                auth.registrar_acao('update', 'account_payable', int(conta_id), {'descricao': n_desc})
                                cmp.sucesso_e_recarrega("Conta atualizada!")
                            except Exception as e:
                                auth.registrar_acao('update', 'account_payable', int(conta_id), {'erro': str(e)}, status='error')
                                st.error(f"Erro ao salvar: {e}")

            cmp.painel_acoes_conta('pagar', conta)
            st.markdown("---")
            cmp.painel_anexos('payable', int(conta_id), 'account_payable', titulo="📎 Boletos e Comprovantes")

# ==============================================================================
# ABA 2: NOVA CONTA
# ==============================================================================
with tab2:
    if not auth.pode_editar():
        st.info("Seu perfil permite apenas visualização.")
    elif not map_fornecedores:
        st.warning("Cadastre um fornecedor antes de lançar contas a pagar.")
        st.page_link("pages/3_Fornecedores.py", label="Ir para Fornecedores", icon="🏭")
    else:
        st.subheader("Lançar Conta a Pagar")
        st.caption("Contas parceladas geram uma conta por mês, com o valor dividido entre as parcelas.")
        categorias = rps.buscar_categorias('pagar')

        with st.form("form_nova_pagar", clear_on_submit=True):
            c1, c2 = st.columns(2)
            desc = c1.text_input("Descrição (Ex: Aluguel da loja)")
            forn = c2.selectbox("Fornecedor", list(map_fornecedores.keys()), format_func=lambda x: map_fornecedores[x])

            c3, c4, c5 = st.columns(3)
            valor = c3.number_input("Valor Total (R$)", min_value=0.0, step=10.0, format="%.2f")
            venc = c4.date_input("Primeiro Vencimento", value=date.today(), format="DD/MM/YYYY")
            parcelas = c5.number_input("Parcelas", min_value=1, max_value=120, value=1)

            c6, c7, c8 = st.columns(3)
            cat_sel = c6.selectbox("Categoria", ["(sem categoria)"] + categorias)
            cat_nova = c6.text_input("Ou nova categoria")
            juros = c7.number_input("Juros ao mês (%)", min_value=0.0, step=0.5)
            multa = c8.number_input("Multa (%)", min_value=0.0, step=0.5)

            c9, c10 = st.columns(2)
            recorrente = c9.checkbox("Conta recorrente?")
            recorrencia = c10.selectbox("Frequência", list(cmp.RECORRENCIAS.keys()))
            tags = cmp.seletor_tags("Tags", 'payable', key="tags_nova_pagar")
            obs = st.text_area("Observações")

            if st.form_submit_button("💾 Salvar Conta", type="primary"):
                try:
                    ids = rps.cadastrar_conta_pagar(
                        descricao=desc,
                        fornecedor_id=forn,
                        valor=valor,
                        vencimento=venc,
                        total_parcelas=parcelas,
                        categoria=cat_nova.strip() or (cat_sel if cat_sel != "(sem categoria)" else None),
                        observacoes=obs or None,
                        juros_pct=juros or None,
                        multa_pct=multa or None,
                        recorrente=recorrente,
                        tipo_recorrencia=cmp.RECORRENCIAS[recorrencia] if recorrente else None,
                        tags=tags,
                        criado_por=st.session_state.get('usuario_logado'),
                    )
                    auth.registrar_acao('create', 'account_payable', ids[0],
                                        {'descricao': desc, 'valor': valor, 'parcelas': len(ids)})
                    cmp.sucesso_e_recarrega(f"{len(ids)} conta(s) lançada(s)!")
                except Exception as e:
                    auth.registrar_acao('create', 'account_payable', None, {'descricao': desc, 'erro': str(e)},
                                        status='error')
                    st.error(f"Erro ao salvar: {e}")
