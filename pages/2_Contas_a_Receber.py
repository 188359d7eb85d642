import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import contas_rps as rps
from services import geral_svc as g_svc
from services import mascaras_svc as msk
from services import status_svc as sts

import streamlit as st
import auth
import componentes as cmp
from datetime import date

st.set_page_config(page_title="Contas a Receber", layout="wide", page_icon="💰")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()

st.title("💰 Contas a Receber")

tab1, tab2 = st.tabs(["📋 Contas", "➕ Nova Conta"])

# ==============================================================================
# ABA 1: LISTAGEM E AÇÕES
# ==============================================================================
with tab1:
    df_todas = rps.buscar_contas('receber')

    m1, m2, m3 = st.columns(3)
    for col, status, titulo in ((m1, 'a_vencer', "A Vencer"), (m2, 'vencida', "Atrasadas"), (m3, 'paga', "Recebidas")):
        sel = df_todas[df_todas['status_efetivo'] == status]
        col.metric(titulo, g_svc.format_brl(sel['amount'].sum()), delta=f"{len(sel)} contas", delta_color="off")

    cf1, cf2 = st.columns([2, 2])
    filtro = cf1.radio("Status:", list(cmp.FILTROS_STATUS.keys()), horizontal=True)
    busca = cf2.text_input("🔍 Buscar (descrição ou cliente)")

    df = rps.buscar_contas('receber', status=cmp.FILTROS_STATUS[filtro])
    if busca:
        termo = busca.strip().lower()
        df = df[df['description'].str.lower().str.contains(termo, regex=False)
                | df['customer_name'].str.lower().str.contains(termo, regex=False)]

    if df.empty:
        st.info("Nenhuma conta encontrada.")
    else:
        cmp.tabela_contas(df, 'receber')

        st.markdown("---")
        conta_id = st.selectbox(
            "Selecione uma conta para ver detalhes:",
            df['id'].tolist(),
            format_func=lambda x: f"#{x} · {df.loc[df['id'] == x, 'description'].values[0]}"
        )
        conta = rps.buscar_detalhe_conta('receber', int(conta_id))

        if conta:
            st.markdown(f"### {conta['description']}")
            d1, d2, d3, d4 = st.columns(4)
            d1.metric("Valor", g_svc.format_brl(conta['amount']))
            d2.metric("Vencimento", g_svc.formata_data(conta['due_date']))
            d3.metric("Status", cmp.status_visual(conta['status_efetivo']))
            d4.metric("Cliente", conta['customer_name'])
            if conta.get('customer_document'):
                doc = conta['customer_document']
                st.caption(f"Documento: {msk.mask_document(doc, 'cpf' if len(doc) == 11 else 'cnpj')}")
            if conta.get('parent_id'):
                st.caption(f"Renegociação da conta #{conta['parent_id']} "
                           f"(vencimento original {g_svc.formata_data(conta['original_due_date'])})")
            if conta['tags']:
                st.caption("🏷️ " + ", ".join(conta['tags']))

            if auth.pode_editar() and conta['status'] not in sts.STATUS_FINAIS:
                with st.expander("✏️ Editar conta"):
                    with st.form(f"edit_receber_{conta_id}"):
                        e1, e2 = st.columns(2)
                        n_desc = e1.text_input("Descrição", value=conta['description'])
                        n_cliente = e2.text_input("Cliente", value=conta['customer_name'])
                        e3, e4, e5 = st.columns(3)
                        n_valor = e3.number_input("Valor (R$)", min_value=0.01, value=float(conta['amount']), step=10.0)
                        n_venc = e4.date_input("Vencimento", value=g_svc.parse_data(conta['due_date']), format="DD/MM/YYYY")
                        n_cat = e5.text_input("Categoria", value=conta['category'] or "")
                        n_tags = cmp.seletor_tags("Tags", 'receivable', key=f"tags_edit_receber_{conta_id}",
                                                  default=conta['tags'])
                        n_obs = st.text_area("Observações", value=conta['notes'] or "")
                        if st.form_submit_button("💾 Salvar Alterações"):
                            try:
                                rps.atualizar_conta('receber', int(conta_id), description=n_desc,
                                                    customer_name=n_cliente, amount=n_valor, due_date=n_venc,
                                                    category=n_cat or None, tags=n_tags, notes=n_obs or None)
                                auth.registrar_acao('update', 'account_receivable', int(conta_id), {'descricao': n_desc})
                                cmp.sucesso_e_recarrega("Conta atualizada!")
                            except Exception as e:
                                auth.registrar_acao('update', 'account_receivable', int(conta_id), {'erro': str(e)},
                                                    status='error')
                                st.error(f"Erro ao salvar: {e}")

            cmp.painel_acoes_conta('receber', conta)
            st.markdown("---")
            cmp.painel_anexos('receivable', int(conta_id), 'account_receivable')

# ==============================================================================
# ABA 2: NOVA CONTA
# ==============================================================================
with tab2:
    if not auth.pode_editar():
        st.info("Seu perfil permite apenas visualização.")
    else:
        st.subheader("Lançar Conta a Receber")
        categorias = rps.buscar_categorias('receber')

        tipo_doc = st.radio("Documento do cliente:", ["CPF", "CNPJ"], horizontal=True)
        with st.form("form_nova_receber", clear_on_submit=True):
            c1, c2 = st.columns(2)
            desc = c1.text_input("Descrição (Ex: Venda pedido 123)")
            cliente = c2.text_input("Cliente")

            c3, c4, c5, c6 = st.columns(4)
            with c3:
                doc_num = cmp.campo_documento(tipo_doc, tipo_doc.lower(), key=f"doc_nova_receber_{tipo_doc}")
            valor = c4.number_input("Valor Total (R$)", min_value=0.0, step=10.0, format="%.2f")
            venc = c5.date_input("Primeiro Vencimento", value=date.today(), format="DD/MM/YYYY")
            parcelas = c6.number_input("Parcelas", min_value=1, max_value=120, value=1)

            c7, c8, c9 = st.columns(3)
            cat_sel = c7.selectbox("Categoria", ["(sem categoria)"] + categorias)
            cat_nova = c7.text_input("Ou nova categoria")
            juros = c8.number_input("Juros ao mês (%)", min_value=0.0, step=0.5)
            multa = c9.number_input("Multa (%)", min_value=0.0, step=0.5)

            c10, c11 = st.columns(2)
            recorrente = c10.checkbox("Conta recorrente?")
            recorrencia = c11.selectbox("Frequência", list(cmp.RECORRENCIAS.keys()))
            tags = cmp.seletor_tags("Tags", 'receivable', key="tags_nova_receber")
            obs = st.text_area("Observações")

            if st.form_submit_button("💾 Salvar Conta", type="primary"):
                if doc_num and not msk.validate_document(doc_num, tipo_doc.lower()):
                    st.error(f"{tipo_doc} inválido.")
                else:
                    try:
                        ids = rps.cadastrar_conta_receber(
                            descricao=desc,
                            cliente=cliente,
                            valor=valor,
                            vencimento=venc,
                            total_parcelas=parcelas,
                            documento_cliente=doc_num or None,
                            categoria=cat_nova.strip() or (cat_sel if cat_sel != "(sem categoria)" else None),
                            observacoes=obs or None,
                            juros_pct=juros or None,
                            multa_pct=multa or None,
                            recorrente=recorrente,
                            tipo_recorrencia=cmp.RECORRENCIAS[recorrencia] if recorrente else None,
                            tags=tags,
                            criado_por=st.session_state.get('usuario_logado'),
                        )
                        auth.registrar_acao('create', 'account_receivable', ids[0],
                                            {'descricao': desc, 'cliente': cliente, 'valor': valor, 'parcelas': len(ids)})
                        cmp.sucesso_e_recarrega(f"{len(ids)} conta(s) lançada(s)!")
                    except Exception as e:
                        auth.registrar_acao('create', 'account_receivable', None, {'descricao': desc, 'erro': str(e)},
                                            status='error')
                        st.error(f"Erro ao salvar: {e}")
