import streamlit as st
import time
import logging
import database as db
from repositories import logs_rps

logger = logging.getLogger(__name__)

# Papéis que podem lançar/alterar registros
PAPEIS_EDICAO = ('admin', 'financeiro')


@st.cache_resource
def _preparar_banco():
    """Executa o init_db uma vez por processo do Streamlit."""
    db.init_db()
    return True


# --- 1. LÓGICA DE SESSÃO E LOGIN ---

def validar_sessao():
    """
    Verifica se existe usuário logado.
    Usa .get() para não quebrar com erros de chave inexistente.
    """
    _preparar_banco()
    return st.session_state.get('usuario_logado') is not None

def registrar_acao(acao, entidade, entidade_id=None, detalhes=None, status='success'):
    """Grava a trilha de auditoria em nome do usuário da sessão."""
    usuario = st.session_state.get('usuario_logado')
    try:
        logs_rps.registrar_log(acao, entidade, entidade_id, detalhes, status,
                               user_id=usuario, user_name=st.session_state.get('usuario_nome', usuario))
    except ValueError as e:
        logger.error("Log de auditoria rejeitado: %s", e)

def logout():
    """
    Remove as chaves de sessão e recarrega.
    """
    if validar_sessao():
        registrar_acao('logout', 'user', st.session_state.get('usuario_logado'))
    keys = ['usuario_logado', 'usuario_nome', 'usuario_papel']
    for k in keys:
        if k in st.session_state:
            del st.session_state[k]
    st.rerun()

def realizar_login(usuario, senha):
    """
    Valida credenciais e inicializa a sessão.
    """
    try:
        sucesso, nome, papel = db.verificar_credenciais(usuario, senha)
    except Exception as e:
        st.error(f"Erro de conexão: {e}")
        return False

    if sucesso:
        st.session_state['usuario_logado'] = usuario
        st.session_state['usuario_nome'] = nome
        st.session_state['usuario_papel'] = papel
        registrar_acao('login', 'user', usuario)
        return True

    logs_rps.registrar_log('login', 'user', usuario, {'motivo': 'credenciais inválidas'}, 'error', user_id=usuario)
    return False

# --- 2. PERMISSÕES ---

def papel_atual():
    return st.session_state.get('usuario_papel', 'visualizacao')

def eh_admin():
    return papel_atual() == 'admin'

def pode_editar():
    return papel_atual() in PAPEIS_EDICAO

def exigir_papel(*papeis):
    """Interrompe a página se o usuário não tiver um dos papéis informados."""
    if papel_atual() not in papeis:
        st.error("⛔ Você não tem permissão para acessar esta página.")
        st.stop()

# --- 3. COMPONENTES VISUAIS ---

def tela_login():
    c1, c2, c3 = st.columns([1, 1, 1])
    with c2:
        st.title("🔐 Acesso")
        with st.form("login_form"):
            user_input = st.text_input("Usuário")
            pass_input = st.text_input("Senha", type="password")
            if st.form_submit_button("Entrar", type="primary", use_container_width=True):
                if realizar_login(user_input, pass_input):
                    st.success("Bem-vindo!")
                    time.sleep(0.5)
                    st.rerun()
                else:
                    st.error("Dados incorretos.")

def barra_lateral():
    with st.sidebar:
        st.write(f"👤 **{st.session_state.get('usuario_nome', 'Usuário')}**")
        st.caption(f"Papel: {papel_atual()}")

        st.divider()

        # === MENU DE NAVEGAÇÃO ===
        st.page_link("Home.py", label="Dashboard", icon="📊")

        st.markdown("### Financeiro")
        st.page_link("pages/1_Contas_a_Pagar.py", label="Contas a Pagar", icon="🧾")
        st.page_link("pages/2_Contas_a_Receber.py", label="Contas a Receber", icon="💰")
        st.page_link("pages/3_Fornecedores.py", label="Fornecedores", icon="🏭")

        st.markdown("### Pessoas")
        st.page_link("pages/4_RH.py", label="RH", icon="👥")

        st.markdown("### Relatórios")
        st.page_link("pages/5_Relatorios.py", label="Relatórios", icon="📈")

        if eh_admin():
            st.markdown("### Administração")
            st.page_link("pages/6_Logs.py", label="Logs do Sistema", icon="📜")
            st.page_link("pages/7_Configuracoes.py", label="Configurações", icon="⚙️")

        st.divider()
        if st.button("Sair / Logout", use_container_width=True):
            logout()
