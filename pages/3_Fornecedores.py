import sys
import os

# Adiciona a raiz do projeto ao path (as páginas rodam a partir de pages/)
diretorio_atual = os.path.dirname(os.path.abspath(__file__))
diretorio_raiz = os.path.dirname(diretorio_atual)
sys.path.append(diretorio_raiz)

from repositories import fornecedores_rps as rps
from repositories import notas_rps
from services import brasilapi_svc
from services import geral_svc as g_svc
from services import mascaras_svc as msk

import streamlit as st
import pandas as pd
import auth
import componentes as cmp
from datetime import date

st.set_page_config(page_title="Fornecedores", layout="wide", page_icon="🏭")
if not auth.validar_sessao(): auth.tela_login(); st.stop()
auth.barra_lateral()

st.title("🏭 Fornecedores")

UFS = ["", "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA", "PB", "PR",
       "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO"]


def fmt_documento(doc, tipo):
    if not doc:
        return "-"
    return msk.mask_document(doc, tipo or ('cpf' if len(doc) == 11 else 'cnpj'))


def contato_rapido(forn):
    """Atalhos de contato: telefone, WhatsApp e e-mail."""
    c1, c2, c3 = st.columns(3)
    if forn.get('phone'):
        c1.link_button(f"📞 {msk.mask_phone(forn['phone'])}", f"tel:+55{forn['phone']}")
        c2.link_button("💬 WhatsApp", f"https://wa.me/55{forn['phone']}")
    else:
        c1.caption("Sem telefone cadastrado.")
    if forn.get('email'):
        c3.link_button(f"✉️ {forn['email']}", f"mailto:{forn['email']}")


def secao_notas(forn):
    """Notas fiscais do fornecedor, agrupadas por número (parcelas dentro de cada nota)."""
    fid = int(forn['id'])
    st.markdown("#### 📑 Notas Fiscais")

    grupos = notas_rps.buscar_notas_agrupadas(fid)
    if not grupos:
        st.caption("Nenhuma nota lançada.")

    for grupo in grupos:
        titulo = (f"NF {grupo['invoice_number']} · {g_svc.formata_data(grupo['issue_date'])} · "
                  f"{g_svc.format_brl(grupo['total_amount'])}")
        if grupo['expansivel']:
            titulo += f" · {grupo['quantidade']} parcelas"

        with st.expander(titulo, expanded=False):
            if grupo['product_description']:
                st.caption(grupo['product_description'])
            linhas = pd.DataFrame([{
                'Parcela': f"{int(p['installment_number'])}/{int(p['total_installments'])}"
                if pd.notna(p.get('installment_number')) and pd.notna(p.get('total_installments')) else "-",
                'Vencimento': g_svc.formata_data(p['due_date']),
                'Valor': g_svc.format_brl(p['amount']),
                'Status': cmp.status_visual(p['status_efetivo']),
            } for p in grupo['installments']])
            st.dataframe(linhas, hide_index=True, use_container_width=True)

            if not auth.pode_editar():
                continue

            ids_parcelas = [int(p['id']) for p in grupo['installments']]
            parcela_id = st.selectbox(
                "Parcela para editar:", ids_parcelas,
                format_func=lambda x: next(f"{g_svc.formata_data(p['due_date'])} · {g_svc.format_brl(p['amount'])}"
                                           for p in grupo['installments'] if int(p['id']) == x),
                key=f"sel_parc_{fid}_{grupo['invoice_number']}"
            )
            parcela = next(p for p in grupo['installments'] if int(p['id']) == parcela_id)

            with st.form(f"edit_nota_{parcela_id}"):
                e1, e2 = st.columns(2)
                n_valor = e1.number_input("Valor (R$)", min_value=0.01, value=float(parcela['amount']), step=10.0)
                n_venc = e2.date_input("Vencimento", value=g_svc.parse_data(parcela['due_date']), format="DD/MM/YYYY")
                n_desc = st.text_input("Descrição do produto", value=parcela.get('product_description') or "")
                if st.form_submit_button("💾 Salvar parcela"):
                    try:
                        notas_rps.atualizar_nota(parcela_id, amount=n_valor, due_date=n_venc,
                                                 product_description=n_desc or None)
                        auth.registrar_acao('update', 'supplier_invoice', parcela_id,
                                            {'nota': grupo['invoice_number'], 'valor': n_valor})
                        cmp.sucesso_e_recarrega("Parcela atualizada (conta a pagar sincronizada).")
                    except Exception as e:
                        auth.registrar_acao('update', 'supplier_invoice', parcela_id, {'erro': str(e)}, status='error')
                        st.error(f"Erro: {e}")

            b1, b2 = st.columns(2)
            if b1.button("🗑️ Excluir esta parcela", key=f"del_parc_{parcela_id}"):
                try:
                    notas_rps.excluir_nota(parcela_id)
                    auth.registrar_acao('delete', 'supplier_invoice', parcela_id, {'nota': grupo['invoice_number']})
                    cmp.mostrar_sucesso("Parcela e conta a pagar removidas.")
                except Exception as e:
                    st.error(f"Erro: {e}")
            if b2.button("🗑️ Excluir nota inteira", key=f"del_nota_{fid}_{grupo['invoice_number']}", type="primary"):
                try:
                    qtd = notas_rps.excluir_nota_completa(fid, grupo['invoice_number'])
                    auth.registrar_acao('delete', 'supplier_invoice', None,
                                        {'nota': grupo['invoice_number'], 'parcelas': qtd})
                    cmp.mostrar_sucesso(f"Nota removida ({qtd} parcela(s)).")
                except Exception as e:
                    st.error(f"Erro: {e}")

    if auth.pode_editar():
        with st.expander("➕ Lançar Nota Fiscal"):
            with st.form(f"form_nota_{fid}", clear_on_submit=True):
                n1, n2, n3 = st.columns(3)
                numero = n1.text_input("Número da NF")
                emissao = n2.date_input("Emissão", value=date.today(), format="DD/MM/YYYY")
                valor_total = n3.number_input("Valor Total (R$)", min_value=0.0, step=10.0, format="%.2f")
                n4, n5 = st.columns(2)
                primeiro_venc = n4.date_input("Primeiro Vencimento", value=date.today(), format="DD/MM/YYYY")
                qtd_parcelas = n5.number_input("Parcelas", min_value=1, max_value=60, value=1)
                descricao = st.text_input("Descrição dos produtos")
                obs = st.text_area("Observações")
                if st.form_submit_button("💾 Lançar Nota", type="primary"):
                    try:
                        ids = notas_rps.lancar_nota(fid, numero, valor_total, primeiro_venc, qtd_parcelas,
                                                    descricao_produto=descricao or None, data_emissao=emissao,
                                                    observacoes=obs or None,
                                                    criado_por=st.session_state.get('usuario_logado'))
                        auth.registrar_acao('create', 'supplier_invoice', ids[0],
                                            {'nota': numero, 'valor': valor_total, 'parcelas': len(ids)})
                        cmp.sucesso_e_recarrega(f"Nota {numero} lançada com {len(ids)} conta(s) a pagar.")
                    except Exception as e:
                        auth.registrar_acao('create', 'supplier_invoice', None, {'nota': numero, 'erro': str(e)},
                                            status='error')
                        st.error(f"Erro: {e}")


def secao_boleto(forn):
    fid = int(forn['id'])
    st.markdown("#### 🧾 Boleto Padrão")
    if forn.get('default_boleto_url'):
        if st.button("⬇️ Preparar boleto", key=f"prep_boleto_{fid}"):
            try:
                st.session_state[f"boleto_{fid}"] = rps.baixar_boleto_padrao(fid)
                auth.registrar_acao('download', 'supplier', fid, {'arquivo': 'boleto padrão'})
            except Exception as e:
                st.error(f"Erro ao baixar: {e}")
        if st.session_state.get(f"boleto_{fid}"):
            st.download_button("Salvar boleto", data=st.session_state[f"boleto_{fid}"],
                               file_name=f"boleto_{fid}.pdf", mime="application/pdf", key=f"dl_boleto_{fid}")
    else:
        st.caption("Nenhum boleto padrão.")

    if auth.pode_editar():
        arquivo = st.file_uploader("Enviar boleto padrão", type=cmp.TIPOS_ARQUIVO_ACEITOS, key=f"up_boleto_{fid}")
        if arquivo is not None and st.button("Salvar boleto padrão", key=f"btn_boleto_{fid}"):
            try:
                rps.definir_boleto_padrao(fid, arquivo.name, arquivo.getvalue(), arquivo.type,
                                          st.session_state.get('usuario_logado'))
                auth.registrar_acao('upload', 'supplier', fid, {'arquivo': arquivo.name})
                cmp.mostrar_sucesso("Boleto padrão atualizado.")
            except Exception as e:
                auth.registrar_acao('upload', 'supplier', fid, {'erro': str(e)}, status='error')
                st.error(f"Erro: {e}")


tab1, tab2 = st.tabs(["📋 Fornecedores", "➕ Novo Fornecedor"])

# ==============================================================================
# ABA 1: LISTA E DETALHES
# ==============================================================================
with tab1:
    cf1, cf2 = st.columns([3, 1])
    busca = cf1.text_input("🔍 Buscar por nome ou documento")
    apenas_ativos = cf2.checkbox("Apenas ativos", value=True)

    df = rps.buscar_fornecedores(apenas_ativos=apenas_ativos, busca=busca or None)

    if df.empty:
        st.info("Nenhum fornecedor encontrado.")
    else:
        exibicao = pd.DataFrame({
            'Nome': df['name'],
            'Documento': [fmt_documento(d, t) for d, t in zip(df['document'], df['document_type'])],
            'Categoria': df['category'].fillna('-'),
            'Telefone': df['phone'].fillna('').apply(msk.mask_phone),
            'Cidade/UF': [f"{c or '-'}/{u or '-'}" for c, u in zip(df['city'], df['state'])],
            'Ativo': df['is_active'].astype(bool),
            'Tags': df['tags'].apply(lambda t: ", ".join(t)),
        })
        st.dataframe(exibicao, hide_index=True, use_container_width=True)

        st.markdown("---")
        forn_id = st.selectbox("Selecione um fornecedor:", df['id'].tolist(),
                               format_func=lambda x: df.loc[df['id'] == x, 'name'].values[0])
        forn = rps.buscar_detalhe_fornecedor(int(forn_id))

        if forn:
            st.markdown(f"### {forn['name']}")
            st.caption(f"{fmt_documento(forn['document'], forn['document_type'])} · {forn['category'] or 'Sem categoria'}"
                       + ("" if forn['is_active'] else " · :red[Inativo]"))
            contato_rapido(forn)

            t_dados, t_notas, t_arquivos = st.tabs(["Dados", "Notas Fiscais", "Boleto e Anexos"])

            with t_dados:
                if auth.pode_editar():
                    with st.form(f"edit_forn_{forn_id}"):
                        e1, e2, e3 = st.columns([3, 1, 2])
                        n_nome = e1.text_input("Nome / Razão Social", value=forn['name'])
                        n_tipo = e2.selectbox("Tipo Doc.", ['cnpj', 'cpf'],
                                              index=1 if forn['document_type'] == 'cpf' else 0)
                        n_doc = e3.text_input("Documento", value=fmt_documento(forn['document'], forn['document_type'])
                                              if forn['document'] else "")
                        e4, e5, e6 = st.columns(3)
                        n_cat = e4.text_input("Categoria", value=forn['category'] or "")
                        n_email = e5.text_input("E-mail", value=forn['email'] or "")
                        n_tel = e6.text_input("Telefone", value=msk.mask_phone(forn['phone']) if forn['phone'] else "")
                        e7, e8, e9 = st.columns([3, 2, 1])
                        n_end = e7.text_input("Endereço", value=forn['address'] or "")
                        n_cid = e8.text_input("Cidade", value=forn['city'] or "")
                        n_uf = e9.selectbox("UF", UFS, index=UFS.index(forn['state']) if forn['state'] in UFS else 0)
                        n_tags = cmp.seletor_tags("Tags", 'supplier', key=f"tags_forn_{forn_id}", default=forn['tags'])
                        n_obs = st.text_area("Observações", value=forn['notes'] or "")
                        n_ativo = st.checkbox("Fornecedor ativo", value=bool(forn['is_active']))
                        if st.form_submit_button("💾 Salvar Alterações"):
                            try:
                                rps.atualizar_fornecedor(
                                    int(forn_id), name=n_nome, document=n_doc, document_type=n_tipo,
                                    category=n_cat or None, email=n_email or None, phone=n_tel, address=n_end or None,
                                    city=n_cid or None, state=n_uf or None, notes=n_obs or None, is_active=n_ativo,
                                    tags=n_tags,
                                )
                                auth.registrar_acao('update', 'supplier', int(forn_id), {'nome': n_nome})
                                cmp.sucesso_e_recarrega("Fornecedor atualizado!")
                            except Exception as e:
                                auth.registrar_acao('update', 'supplier', int(forn_id), {'erro': str(e)}, status='error')
                                st.error(f"Erro: {e}")

                    if st.checkbox("Quero excluir este fornecedor", key=f"chk_del_forn_{forn_id}"):
                        if st.button("🗑️ Excluir fornecedor", type="primary", key=f"del_forn_{forn_id}"):
                            try:
                                rps.excluir_fornecedor(int(forn_id))
                                auth.registrar_acao('delete', 'supplier', int(forn_id), {'nome': forn['name']})
                                cmp.mostrar_sucesso("Fornecedor excluído.")
                            except Exception as e:
                                auth.registrar_acao('delete', 'supplier', int(forn_id), {'erro': str(e)}, status='error')
                                st.error(f"{e}")
                else:
                    st.write(f"**E-mail:** {forn['email'] or '-'}")
                    st.write(f"**Endereço:** {forn['address'] or '-'} · {forn['city'] or '-'}/{forn['state'] or '-'}")
                    if forn['notes']:
                        st.write(f"**Observações:** {forn['notes']}")

            with t_notas:
                secao_notas(forn)

            with t_arquivos:
                secao_boleto(forn)
                st.markdown("---")
                cmp.painel_anexos('supplier', int(forn_id), 'supplier')

# ==============================================================================
# ABA 2: NOVO FORNECEDOR
# ==============================================================================
with tab2:
    if not auth.pode_editar():
        st.info("Seu perfil permite apenas visualização.")
    else:
        st.subheader("Cadastrar Fornecedor")

        # Consulta na BrasilAPI preenche o formulário
        pre = st.session_state.get('forn_prefill', {})
        b1, b2 = st.columns([3, 1])
        cnpj_busca = b1.text_input("Preencher pelo CNPJ", placeholder="00.000.000/0000-00")
        b2.write("")
        if b2.button("🔎 Consultar CNPJ"):
            if not msk.validate_cnpj(cnpj_busca):
                st.error("CNPJ inválido.")
            else:
                with st.spinner("Consultando..."):
                    dados = brasilapi_svc.consultar_cnpj(cnpj_busca)
                if dados:
                    st.session_state['forn_prefill'] = dados
                    st.rerun()
                else:
                    st.warning("CNPJ não encontrado ou serviço indisponível.")

        with st.form("form_novo_forn", clear_on_submit=True):
            c1, c2, c3 = st.columns([3, 1, 2])
            nome = c1.text_input("Nome / Razão Social", value=pre.get('nome_fantasia') or pre.get('razao_social', ''))
            tipo_doc = c2.selectbox("Tipo Doc.", ['cnpj', 'cpf'])
            documento = c3.text_input("Documento", value=msk.mask_cnpj(pre['cnpj']) if pre.get('cnpj') else "")
            c4, c5, c6 = st.columns(3)
            categoria = c4.text_input("Categoria")
            email = c5.text_input("E-mail", value=pre.get('email', ''))
            telefone = c6.text_input("Telefone", value=msk.mask_phone(pre.get('telefone', '')))
            c7, c8, c9 = st.columns([3, 2, 1])
            endereco_pre = ", ".join(p for p in (pre.get('logradouro'), pre.get('numero'), pre.get('bairro')) if p)
            endereco = c7.text_input("Endereço", value=endereco_pre)
            cidade = c8.text_input("Cidade", value=pre.get('municipio', ''))
            uf = c9.selectbox("UF", UFS, index=UFS.index(pre['uf']) if pre.get('uf') in UFS else 0)
            tags = cmp.seletor_tags("Tags", 'supplier', key="tags_novo_forn")
            obs = st.text_area("Observações")

            if st.form_submit_button("💾 Salvar Fornecedor", type="primary"):
                try:
                    novo_id = rps.cadastrar_fornecedor(
                        nome=nome, documento=documento, tipo_documento=tipo_doc, categoria=categoria or None,
                        email=email or None, telefone=telefone, endereco=endereco or None, cidade=cidade or None,
                        uf=uf or None, observacoes=obs or None, tags=tags,
                    )
                    auth.registrar_acao('create', 'supplier', novo_id, {'nome': nome})
                    st.session_state.pop('forn_prefill', None)
                    cmp.sucesso_e_recarrega(f"{nome} cadastrado!")
                except Exception as e:
                    auth.registrar_acao('create', 'supplier', None, {'nome': nome, 'erro': str(e)}, status='error')
                    st.error(f"Erro ao cadastrar: {e}")
