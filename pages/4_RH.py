import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import funcionarios_rps as rps
from services import geral_svc as g_svc
from services import mascaras_svc as msk
from services import storage_svc as stg

import streamlit as st
import pandas as pd
import auth
import componentes as cmp
from datetime import date

st.set_page_config(page_title="RH", layout="wide", page_icon="👥")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()

st.title("👥 Recursos Humanos")

FILTROS = {"Ativos": 'active', "Férias": 'vacation', "Inativos": 'inactive', "Todos": None}


def form_dados_bancarios(prefixo, atual=None):
    atual = atual or {}
    b1, b2, b3, b4 = st.columns(4)
    return {
        'banco': b1.text_input("Banco", value=atual.get('banco', ''), key=f"{prefixo}_banco"),
        'agencia': b2.text_input("Agência", value=atual.get('agencia', ''), key=f"{prefixo}_ag"),
        'conta': b3.text_input("Conta", value=atual.get('conta', ''), key=f"{prefixo}_conta"),
        'pix': b4.text_input("PIX", value=atual.get('pix', ''), key=f"{prefixo}_pix"),
    }


tab1, tab2 = st.tabs(["Gerenciar Equipe", "Novo Funcionário"])

# ==============================================================================
# ABA 1: GERENCIAR
# ==============================================================================
with tab1:
    contagem = rps.contar_por_status()
    df_ativos = rps.buscar_funcionarios('active')
    k1, k2, k3 = st.columns(3)
    k1.metric("Ativos", contagem['active'])
    k2.metric("Em Férias", contagem['vacation'])
    k3.metric("Custo Mensal Estimado (ativos)", g_svc.format_brl(df_ativos['custo_mensal'].sum()),
              help=f"Salário + (VT + VR) x {rps.DIAS_UTEIS_MES} dias úteis.")

    filtro = st.radio("Exibir:", list(FILTROS.keys()), horizontal=True)
    df = rps.buscar_funcionarios(FILTROS[filtro])

    if df.empty:
        st.info("Nenhum funcionário encontrado.")
    else:
        exibicao = pd.DataFrame({
            'Nome': df['name'],
            'Cargo': df['role'].fillna('-'),
            'Setor': df['sector'].fillna('-'),
            'Admissão': df['admission_date'].apply(g_svc.formata_data),
            'Salário': df['salary'].apply(g_svc.format_brl),
            'Custo Mensal': df['custo_mensal'].apply(g_svc.format_brl),
            'Status': df['status'].map(rps.STATUS_FUNCIONARIO),
        })
        st.dataframe(exibicao, hide_index=True, use_container_width=True)

        st.markdown("---")
        func_id = st.selectbox("Selecione um funcionário:", df['id'].tolist(),
                               format_func=lambda x: df.loc[df['id'] == x, 'name'].values[0])
        func = rps.buscar_detalhe_funcionario(int(func_id))

        if func:
            col_foto, col_info = st.columns([1, 4])
            with col_foto:
                caminho_foto = stg.verificar_url_assinada(func['photo_url']) if func.get('photo_url') else None
                if caminho_foto:
                    st.image(stg.ler_objeto(caminho_foto), width=120)
                else:
                    st.markdown("### 👤")
            with col_info:
                st.markdown(f"### {func['name']}")
                st.caption(f"{func['role'] or '-'} · {func['sector'] or '-'} · "
                           f"{rps.STATUS_FUNCIONARIO.get(func['status'], func['status'])}")
                i1, i2, i3, i4 = st.columns(4)
                i1.metric("Salário", g_svc.format_brl(func['salary']))
                i2.metric("VT (dia)", g_svc.format_brl(func['vt_value']))
                i3.metric("VR (dia)", g_svc.format_brl(func['vr_value']))
                i4.metric("Custo Mensal", g_svc.format_brl(func['custo_mensal']))
                if func['document']:
                    st.caption(f"CPF: {msk.mask_cpf(func['document'])}")

            if auth.pode_editar():
                with st.expander("✏️ Editar cadastro"):
                    with st.form(f"edit_func_{func_id}"):
                        e1, e2, e3 = st.columns([3, 2, 2])
                        n_nome = e1.text_input("Nome", value=func['name'])
                        n_doc = e2.text_input("CPF", value=msk.mask_cpf(func['document']) if func['document'] else "")
                        n_status = e3.selectbox("Status", list(rps.STATUS_FUNCIONARIO.keys()),
                                                format_func=lambda s: rps.STATUS_FUNCIONARIO[s],
                                                index=list(rps.STATUS_FUNCIONARIO.keys()).index(func['status']))
                        e4, e5 = st.columns(2)
                        n_cargo = e4.text_input("Cargo", value=func['role'] or "")
                        n_setor = e5.text_input("Setor", value=func['sector'] or "")
                        e6, e7, e8 = st.columns(3)
                        n_sal = e6.number_input("Salário (R$)", min_value=0.0, value=float(func['salary']), step=100.0)
                        n_vt = e7.number_input("VT diário (R$)", min_value=0.0, value=float(func['vt_value']), step=1.0)
                        n_vr = e8.number_input("VR diário (R$)", min_value=0.0, value=float(func['vr_value']), step=1.0)
                        e9, e10 = st.columns(2)
                        n_adm = e9.date_input("Admissão", value=g_svc.parse_data(func['admission_date']),
                                              format="DD/MM/YYYY")
                        n_dem = e10.date_input("Demissão (obrigatória para inativar)",
                                               value=g_svc.parse_data(func['resignation_date']), format="DD/MM/YYYY")
                        st.markdown("**Dados Bancários**")
                        n_banco = form_dados_bancarios(f"edit_{func_id}", func['bank_info'])
                        n_obs = st.text_area("Observações", value=func['notes'] or "")
                        if st.form_submit_button("💾 Salvar Alterações"):
                            try:
                                rps.atualizar_funcionario(
                                    int(func_id), name=n_nome, document=n_doc, status=n_status, role=n_cargo or None,
                                    sector=n_setor or None, salary=n_sal, vt_value=n_vt, vr_value=n_vr,
                                    admission_date=n_adm, resignation_date=n_dem,
                                    bank_info={k: v for k, v in n_banco.items() if v}, notes=n_obs or None,
                                )
                                auth.registrar_acao('update', 'employee', int(func_id), {'nome': n_nome, 'status': n_status})
                                cmp.sucesso_e_recarrega("Cadastro atualizado!")
                            except Exception as e:
                                auth.registrar_acao('update', 'employee', int(func_id), {'erro': str(e)}, status='error')
                                st.error(f"Erro: {e}")

                foto = st.file_uploader("Foto", type=["png", "jpg", "jpeg", "webp"], key=f"foto_{func_id}")
                if foto is not None and st.button("Salvar foto", key=f"btn_foto_{func_id}"):
                    try:
                        rps.atualizar_foto(int(func_id), foto.name, foto.getvalue())
                        auth.registrar_acao('upload', 'employee', int(func_id), {'arquivo': foto.name})
                        cmp.mostrar_sucesso("Foto atualizada.")
                    except Exception as e:
                        st.error(f"Erro: {e}")
            elif func['bank_info']:
                st.caption("Dados bancários: " + " · ".join(f"{k}: {v}" for k, v in func['bank_info'].items()))

# ==============================================================================
# ABA 2: NOVO CADASTRO
# ==============================================================================
with tab2:
    if not auth.pode_editar():
        st.info("Seu perfil permite apenas visualização.")
    else:
        st.subheader("Cadastrar Colaborador")
        with st.form("form_novo_func", clear_on_submit=True):
            c1, c2 = st.columns([3, 2])
            nome = c1.text_input("Nome Completo")
            cpf = c2.text_input("CPF", placeholder="000.000.000-00")
            c3, c4, c5 = st.columns(3)
            cargo = c3.text_input("Cargo")
            setor = c4.text_input("Setor")
            admissao = c5.date_input("Admissão", value=date.today(), format="DD/MM/YYYY")
            c6, c7, c8 = st.columns(3)
            salario = c6.number_input("Salário Base (R$)", min_value=0.0, step=100.0)
            vt = c7.number_input("VT diário (R$)", min_value=0.0, step=1.0)
            vr = c8.number_input("VR diário (R$)", min_value=0.0, step=1.0)
            st.caption(f"O custo mensal estimado considera {rps.DIAS_UTEIS_MES} dias úteis de VT e VR.")
            st.markdown("**Dados Bancários**")
            banco = form_dados_bancarios("novo")
            obs = st.text_area("Observações")

            if st.form_submit_button("💾 Salvar Funcionário", type="primary"):
                try:
                    novo_id = rps.cadastrar_funcionario(
                        nome=nome, documento=cpf, cargo=cargo or None, setor=setor or None, salario=salario,
                        vt_diario=vt, vr_diario=vr, data_admissao=admissao,
                        dados_bancarios={k: v for k, v in banco.items() if v}, observacoes=obs or None,
                    )
                    auth.registrar_acao('create', 'employee', novo_id, {'nome': nome})
                    custo = rps.custo_mensal_estimado(salario, vt, vr)
                    cmp.sucesso_e_recarrega(f"{nome} cadastrado! Custo mensal estimado: {g_svc.format_brl(custo)}")
                except Exception as e:
                    auth.registrar_acao('create', 'employee', None, {'nome': nome, 'erro': str(e)}, status='error')
                    st.error(f"Erro ao cadastrar: {e}")
