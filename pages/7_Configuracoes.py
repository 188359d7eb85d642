import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import admin_usuarios_rps as rps
from repositories import tags_rps

import streamlit as st
import database as db
import auth
import componentes as cmp
import time

st.set_page_config(page_title="Configurações", layout="wide", page_icon="⚙️")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()
auth.exigir_papel('admin')

st.title("⚙️ Configurações")

ROTULOS_TAG = {'all': 'Todos', 'supplier': 'Fornecedores', 'payable': 'Contas a Pagar', 'receivable': 'Contas a Receber'}

tab1, tab2, tab3 = st.tabs(["Novo Usuário", "Gerenciar Usuários", "Tags"])

# --- ABA 1: NOVO USUÁRIO ---
with tab1:
    st.subheader("Cadastrar Novo Usuário")

    # Contador de versão do formulário: ao mudar, todas as keys mudam e os campos voltam vazios
    if "user_form_id" not in st.session_state:
        st.session_state["user_form_id"] = 0
    form_id = st.session_state["user_form_id"]

    with st.form(key=f"form_cadastro_usuario_{form_id}"):
        c1, c2 = st.columns(2)
        new_user = c1.text_input("Username (Login)", key=f"u_login_{form_id}")
        new_nome = c2.text_input("Nome Completo", key=f"u_nome_{form_id}")
        new_pass = c1.text_input("Senha Inicial", type="password", key=f"u_pass_{form_id}")
        new_email = c2.text_input("E-mail", key=f"u_email_{form_id}")
        new_papel = c1.selectbox("Papel", list(db.PAPEIS), format_func=lambda p: rps.PAPEIS_LABELS[p],
                                 index=list(db.PAPEIS).index('visualizacao'), key=f"u_papel_{form_id}")
        submit_btn = st.form_submit_button("Criar Usuário")

    if submit_btn:
        try:
            rps.criar_usuario(new_user, new_pass, new_nome, new_papel, new_email or None)
            auth.registrar_acao('create', 'user', new_user, {'papel': new_papel})
            st.session_state["user_form_id"] += 1
            st.success(f"Usuário {new_user} criado com sucesso!")
            time.sleep(1.5)
            st.rerun()
        except Exception as e:
            auth.registrar_acao('create', 'user', new_user or None, {'erro': str(e)}, status='error')
            st.error(f"Erro ao criar usuário: {e}")

# --- ABA 2: EDITAR USUÁRIO ---
with tab2:
    st.subheader("Editar Usuários")
    users = db.buscar_lista_usuarios()

    if not users.empty:
        exibicao = users.assign(papel=users['papel'].map(rps.PAPEIS_LABELS), ativo=users['ativo'].astype(bool))
        exibicao.columns = ['Login', 'Nome', 'E-mail', 'Papel', 'Ativo']
        st.dataframe(exibicao, hide_index=True, use_container_width=True)

        sel_user = st.selectbox(
            "Selecione para editar:",
            users['username'].tolist(),
            format_func=lambda x: f"{x} - {users[users['username'] == x]['nome_completo'].values[0]}"
        )

        if sel_user:
            u_data = users[users['username'] == sel_user].iloc[0]
            st.divider()

            with st.form(f"edit_user_{sel_user}"):
                ce1, ce2 = st.columns(2)
                enome = ce1.text_input("Nome", value=u_data['nome_completo'])
                eemail = ce2.text_input("E-mail", value=u_data['email'] or "")
                epapel = ce1.selectbox("Papel", list(db.PAPEIS), format_func=lambda p: rps.PAPEIS_LABELS[p],
                                       index=list(db.PAPEIS).index(u_data['papel']))
                eativo = ce2.checkbox("Ativo?", value=bool(u_data['ativo']))
                enova_senha = ce1.text_input("Resetar Senha (deixe vazio para manter)", type="password")

                if st.form_submit_button("Salvar Alterações"):
                    try:
                        rps.atualizar_usuario(sel_user, enome, epapel, eativo, eemail or None, enova_senha or None)
                        auth.registrar_acao('update', 'user', sel_user,
                                            {'papel': epapel, 'ativo': eativo, 'senha_alterada': bool(enova_senha)})
                        if enova_senha:
                            st.info("Senha alterada no processo.")
                        cmp.sucesso_e_recarrega("Usuário atualizado com sucesso!")
                    except Exception as e:
                        auth.registrar_acao('update', 'user', sel_user, {'erro': str(e)}, status='error')
                        st.error(f"Erro ao atualizar: {e}")
    else:
        st.info("Nenhum usuário cadastrado.")

# --- ABA 3: TAGS ---
with tab3:
    st.subheader("Tags")
    st.caption("Tags ajudam a organizar fornecedores e contas. Tags do tipo 'Todos' aparecem em todas as telas.")

    with st.form("form_tag", clear_on_submit=True):
        t1, t2, t3 = st.columns([3, 1, 2])
        nome_tag = t1.text_input("Nome")
        cor_tag = t2.color_picker("Cor", value=tags_rps.COR_PADRAO)
        tipo_tag = t3.selectbox("Usar em", list(tags_rps.TIPOS_ENTIDADE)[::-1], format_func=lambda t: ROTULOS_TAG[t])
        if st.form_submit_button("➕ Criar Tag"):
            try:
                tags_rps.criar_tag(nome_tag, cor_tag, tipo_tag)
                cmp.sucesso_e_recarrega(f"Tag '{nome_tag}' criada!")
            except Exception as e:
                st.error(f"Erro: {e}")

    df_tags = tags_rps.buscar_tags()
    if df_tags.empty:
        st.info("Nenhuma tag cadastrada.")
    for _, tag in df_tags.iterrows():
        r1, r2, r3 = st.columns([4, 2, 1])
        r1.markdown(f"<span style='color:{tag['color']}'>●</span> **{tag['name']}**", unsafe_allow_html=True)
        r2.caption(ROTULOS_TAG.get(tag['entity_type'], tag['entity_type']))
        if r3.button("🗑️", key=f"del_tag_{tag['id']}"):
            tags_rps.excluir_tag(int(tag['id']))
            st.rerun()
