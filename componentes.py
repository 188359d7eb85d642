"""
Componentes visuais reaproveitados pelas páginas (Streamlit).
Regras de negócio ficam nos repositories; aqui só há tela.
"""

import time

import pandas as pd
import streamlit as st

import auth
from repositories import anexos_rps
from repositories import contas_rps
from repositories import tags_rps
from services import geral_svc as g_svc
from services import mascaras_svc as msk
from services import status_svc as sts

FILTROS_STATUS = {
    "Todas": None,
    "A Vencer": 'a_vencer',
    "Vencidas": 'vencida',
    "Pagas": 'paga',
    "Renegociadas": 'renegociada',
}

ICONES_STATUS = {
    'a_vencer': "🟡",
    'vencida': "🔴",
    'paga': "🟢",
    'renegociada': "🔵",
}

RECORRENCIAS = {
    "Mensal": 'monthly',
    "Semanal": 'weekly',
    "Diária": 'daily',
    "Anual": 'yearly',
}

TIPOS_ARQUIVO_ACEITOS = ["pdf", "png", "jpg", "jpeg", "webp"]


@st.dialog("Sucesso!")
def mostrar_sucesso(msg):
    st.success(msg)
    if st.button("OK"):
        st.rerun()


def sucesso_e_recarrega(msg):
    st.success(msg)
    time.sleep(1)
    st.rerun()


def status_visual(status_efetivo):
    return f"{ICONES_STATUS.get(status_efetivo, '⚪')} {sts.label_status(status_efetivo)}"


def campo_documento(label, tipo, key, value=""):
    """Text input que devolve o documento já com máscara e avisa se for inválido."""
    bruto = st.text_input(label, value=msk.mask_document(value, tipo) if value else "", key=key,
                          placeholder="000.000.000-00" if tipo == 'cpf' else "00.000.000/0000-00")
    numeros = msk.unmask_document(bruto)
    if numeros and len(numeros) == (11 if tipo == 'cpf' else 14) and not msk.validate_document(numeros, tipo):
        st.caption(f":red[{tipo.upper()} inválido]")
    return numeros


def seletor_tags(label, tipo_entidade, key, default=None):
    df_tags = tags_rps.buscar_tags(tipo_entidade)
    opcoes = sorted(set(df_tags['name'].tolist()) | set(default or []))
    return st.multiselect(label, opcoes, default=default or [], key=key)


def painel_anexos(tipo_registro, registro_id, entidade_log, titulo="📎 Anexos"):
    """Lista, envia, baixa e remove anexos de um registro."""
    st.markdown(f"##### {titulo}")
    df = anexos_rps.buscar_anexos(tipo_registro, registro_id)

    if df.empty:
        st.caption("Nenhum anexo.")
    for _, anexo in df.iterrows():
        c1, c2, c3 = st.columns([4, 1, 1])
        tamanho = f"{(anexo['file_size'] or 0) / 1024:.0f} KB"
        c1.write(f"📄 {anexo['file_name']} · {tamanho} · {g_svc.formata_data(anexo['created_at'])}")

        if c2.button("⬇️", key=f"prep_dl_{tipo_registro}_{anexo['id']}", help="Preparar download"):
            try:
                nome, tipo_arq, conteudo = anexos_rps.baixar_anexo(int(anexo['id']))
                st.session_state[f"dl_{tipo_registro}_{anexo['id']}"] = (nome, tipo_arq, conteudo)
                auth.registrar_acao('download', 'attachment', int(anexo['id']), {'arquivo': nome})
            except Exception as e:
                st.error(f"Erro ao baixar: {e}")

        pronto = st.session_state.get(f"dl_{tipo_registro}_{anexo['id']}")
        if pronto:
            c1.download_button("Salvar arquivo", data=pronto[2], file_name=pronto[0], mime=pronto[1],
                               key=f"dl_btn_{tipo_registro}_{anexo['id']}")

        if auth.pode_editar() and c3.button("🗑️", key=f"del_anexo_{tipo_registro}_{anexo['id']}"):
            try:
                anexos_rps.excluir_anexo(int(anexo['id']))
                auth.registrar_acao('delete', 'attachment', int(anexo['id']), {'arquivo': anexo['file_name']})
                st.rerun()
            except Exception as e:
                auth.registrar_acao('delete', 'attachment', int(anexo['id']), {'erro': str(e)}, status='error')
                st.error(f"Erro ao remover: {e}")

    if auth.pode_editar():
        arquivo = st.file_uploader("Enviar arquivo", type=TIPOS_ARQUIVO_ACEITOS,
                                   key=f"up_{tipo_registro}_{registro_id}")
        if arquivo is not None and st.button("Enviar", key=f"btn_up_{tipo_registro}_{registro_id}"):
            try:
                res = anexos_rps.enviar_anexo(tipo_registro, registro_id, arquivo.name, arquivo.getvalue(),
                                              arquivo.type, st.session_state.get('usuario_logado'))
                auth.registrar_acao('upload', 'attachment', res['id'],
                                    {'arquivo': arquivo.name, 'registro': f"{entidade_log}:{registro_id}"})
                st.success("Arquivo enviado!")
                time.sleep(0.5)
                st.rerun()
            except Exception as e:
                auth.registrar_acao('upload', 'attachment', None, {'arquivo': arquivo.name, 'erro': str(e)},
                                    status='error')
                st.error(f"Erro ao enviar: {e}")


def painel_acoes_conta(tipo, conta):
    """Pagamento, estorno, renegociação e exclusão de uma conta (pagar ou receber)."""
    entidade = 'account_payable' if tipo == 'pagar' else 'account_receivable'
    verbo = "Pagamento" if tipo == 'pagar' else "Recebimento"
    conta_id = int(conta['id'])
    status = conta['status']

    if not auth.pode_editar():
        st.info("Seu perfil permite apenas visualização.")
        return

    if conta.get('is_from_invoice'):
        st.info("📑 Conta gerada por Nota Fiscal: edição e exclusão ficam na página de Fornecedores.")

    a1, a2 = st.columns(2)

    with a1:
        if status not in sts.STATUS_FINAIS:
            with st.form(f"form_pagar_{tipo}_{conta_id}"):
                st.markdown(f"**Registrar {verbo}**")
                c1, c2 = st.columns(2)
                dt_pag = c1.date_input("Data", key=f"dt_pag_{tipo}_{conta_id}",
                                       format="DD/MM/YYYY")
                juros = c2.number_input("Juros (R$)", min_value=0.0, step=1.0, key=f"juros_{tipo}_{conta_id}")
                multa = c1.number_input("Multa (R$)", min_value=0.0, step=1.0, key=f"multa_{tipo}_{conta_id}")
                valor = c2.number_input("Valor Pago (R$)", min_value=0.0, value=0.0, step=10.0,
                                        key=f"valor_pag_{tipo}_{conta_id}",
                                        help="Deixe 0 para usar valor da conta + juros + multa.")
                if st.form_submit_button(f"✅ Confirmar {verbo}", type="primary"):
                    try:
                        contas_rps.registrar_pagamento(tipo, conta_id, valor_pago=valor or None, juros=juros,
                                                       multa=multa, data_pagamento=dt_pag)
                        auth.registrar_acao('pay', entidade, conta_id,
                                            {'valor_pago': valor or float(conta['amount']) + juros + multa})
                        sucesso_e_recarrega(f"{verbo} registrado!")
                    except Exception as e:
                        auth.registrar_acao('pay', entidade, conta_id, {'erro': str(e)}, status='error')
                        st.error(f"Erro: {e}")
        elif status == 'paga':
            st.success(f"Paga em {g_svc.formata_data(conta.get('payment_date'))}")
            if st.button("↩️ Estornar", key=f"estornar_{tipo}_{conta_id}"):
                try:
                    contas_rps.estornar_pagamento(tipo, conta_id)
                    auth.registrar_acao('update', entidade, conta_id, {'operacao': 'estorno'})
                    mostrar_sucesso("Pagamento estornado.")
                except Exception as e:
                    st.error(f"Erro: {e}")

    with a2:
        if status not in sts.STATUS_FINAIS:
            with st.form(f"form_reneg_{tipo}_{conta_id}"):
                st.markdown("**Renegociar**")
                c1, c2 = st.columns(2)
                nova_data = c1.date_input("Novo Vencimento", key=f"reneg_dt_{tipo}_{conta_id}", format="DD/MM/YYYY")
                novo_valor = c2.number_input("Valor Base (R$)", min_value=0.01, value=float(conta['amount']),
                                             step=10.0, key=f"reneg_val_{tipo}_{conta_id}")
                r_juros = c1.number_input("Juros (R$)", min_value=0.0, step=1.0, key=f"reneg_j_{tipo}_{conta_id}")
                r_multa = c2.number_input("Multa (R$)", min_value=0.0, step=1.0, key=f"reneg_m_{tipo}_{conta_id}")
                st.caption(f"Novo total: {g_svc.format_brl(novo_valor + r_juros + r_multa)}")
                if st.form_submit_button("🔁 Renegociar"):
                    try:
                        novo_id = contas_rps.renegociar_conta(tipo, conta_id, nova_data, juros=r_juros, multa=r_multa,
                                                              novo_valor=novo_valor,
                                                              usuario=st.session_state.get('usuario_logado'))
                        auth.registrar_acao('renegotiate', entidade, conta_id,
                                            {'nova_conta': novo_id, 'novo_vencimento': nova_data})
                        sucesso_e_recarrega(f"Conta renegociada (nova conta #{novo_id}).")
                    except Exception as e:
                        auth.registrar_acao('renegotiate', entidade, conta_id, {'erro': str(e)}, status='error')
                        st.error(f"Erro: {e}")

    if not conta.get('is_from_invoice'):
        st.markdown("---")
        if st.checkbox("Quero excluir esta conta", key=f"chk_del_{tipo}_{conta_id}"):
            if st.button("🗑️ Excluir definitivamente", type="primary", key=f"del_{tipo}_{conta_id}"):
                try:
                    contas_rps.excluir_conta(tipo, conta_id)
                    auth.registrar_acao('delete', entidade, conta_id, {'descricao': conta['description']})
                    mostrar_sucesso("Conta excluída.")
                except Exception as e:
                    auth.registrar_acao('delete', entidade, conta_id, {'erro': str(e)}, status='error')
                    st.error(f"Erro: {e}")


def tabela_contas(df, tipo):
    """Tabela resumida de contas com status efetivo e valores formatados."""
    nome_col = 'supplier_name' if tipo == 'pagar' else 'customer_name'
    exibicao = df[['id', 'due_date', 'description', nome_col, 'category', 'amount', 'status_efetivo']].copy()
    exibicao['due_date'] = exibicao['due_date'].apply(g_svc.formata_data)
    exibicao['amount'] = exibicao['amount'].apply(g_svc.format_brl)
    exibicao['status_efetivo'] = exibicao['status_efetivo'].apply(status_visual)
    parcelas = [
        f'{int(n)}/{int(t)}' if pd.notna(t) and pd.notna(n) and t > 1 else ''
        for n, t in zip(df['installment_number'], df['total_installments'])
    ]
    exibicao.insert(3, 'parcela', parcelas)
    exibicao.columns = ['ID', 'Vencimento', 'Descrição', 'Parcela',
                        'Fornecedor' if tipo == 'pagar' else 'Cliente', 'Categoria', 'Valor', 'Status']
    st.dataframe(exibicao, hide_index=True, use_container_width=True)
