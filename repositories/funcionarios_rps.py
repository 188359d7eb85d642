import json
from typing import Optional

import pandas as pd

from conectDB.conexao import conectar
import database as db
from services import mascaras_svc as msk
from services import storage_svc as stg

STATUS_FUNCIONARIO = {
    'active': 'Ativo',
    'inactive': 'Inativo',
    'vacation': 'Férias',
}
DIAS_UTEIS_MES = 22

_COLUNAS_EM_REAIS = ('salary', 'vt_value', 'vr_value')
_CAMPOS_EDITAVEIS = (
    'name', 'document', 'role', 'sector', 'salary', 'vt_value', 'vr_value', 'admission_date',
    'resignation_date', 'status', 'bank_info', 'notes',
)


def custo_mensal_estimado(salario: float, vt_diario: float, vr_diario: float, dias_uteis: int = DIAS_UTEIS_MES) -> float:
    """Salário + vales (valores diários de VT e VR vezes os dias úteis do mês)."""
    return round((salario or 0) + dias_uteis * ((vt_diario or 0) + (vr_diario or 0)), 2)


def _validar_documento(documento: Optional[str]) -> Optional[str]:
    numeros = msk.unmask_document(documento)
    if not numeros:
        return None
    if not msk.validate_cpf(numeros):
        raise ValueError(f"CPF inválido: {msk.mask_cpf(numeros)}")
    return numeros


def _validar_valor(nome: str, valor) -> int:
    cents = db.to_cents(valor)
    if cents < 0:
        raise ValueError(f"{nome} não pode ser negativo.")
    return cents


def cadastrar_funcionario(nome: str, documento: Optional[str] = None, cargo: Optional[str] = None,
                          setor: Optional[str] = None, salario: float = 0, vt_diario: float = 0, vr_diario: float = 0,
                          data_admissao=None, status: str = 'active', dados_bancarios: Optional[dict] = None,
                          observacoes: Optional[str] = None) -> int:
    if not nome or not nome.strip():
        raise ValueError("Nome é obrigatório.")
    if status not in STATUS_FUNCIONARIO:
        raise ValueError(f"Status inválido: {status!r}")
    if status == 'inactive':
        raise ValueError("Cadastre o funcionário como ativo; o desligamento é feito na edição.")

    conn = conectar()
    try:
        with conn:
            cur = conn.execute('''
                INSERT INTO employees (name, document, role, sector, salary, vt_value, vr_value, admission_date,
                                       status, bank_info, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (nome.strip(), _validar_documento(documento), cargo, setor,
                  _validar_valor("Salário", salario), _validar_valor("VT", vt_diario), _validar_valor("VR", vr_diario),
                  db._to_iso(data_admissao), status,
                  json.dumps(dados_bancarios, ensure_ascii=False) if dados_bancarios else None, observacoes))
            return cur.lastrowid
    finally:
        conn.close()


def buscar_funcionarios(filtro_status: Optional[str] = None) -> pd.DataFrame:
    """
    Retorna DataFrame de funcionários (valores em reais) com o custo mensal estimado.
    """
    conn = conectar()
    try:
        query = "SELECT id, name, document, role, sector, salary, vt_value, vr_value, admission_date, resignation_date, status, photo_url FROM employees"
        params = []
        if filtro_status:
            query += " WHERE status=?"
            params.append(filtro_status)
        query += " ORDER BY name"
        df = pd.read_sql_query(query, conn, params=params)
    finally:
        conn.close()

    for col in _COLUNAS_EM_REAIS:
        df[col] = df[col].astype(float) / 100
    df['custo_mensal'] = [custo_mensal_estimado(s, vt, vr) for s, vt, vr in zip(df['salary'], df['vt_value'], df['vr_value'])]
    return df


def buscar_detalhe_funcionario(func_id: int) -> Optional[dict]:
    conn = conectar()
    try:
        row = conn.execute("SELECT * FROM employees WHERE id=?", (func_id,)).fetchone()
        if not row:
            return None
        dados = dict(row)
        for col in _COLUNAS_EM_REAIS:
            dados[col] = db.from_cents(dados[col])
        dados['bank_info'] = json.loads(dados['bank_info']) if dados['bank_info'] else {}
        dados['custo_mensal'] = custo_mensal_estimado(dados['salary'], dados['vt_value'], dados['vr_value'])
        return dados
    finally:
        conn.close()


def atualizar_funcionario(func_id: int, **alteracoes) -> None:
    """
    Atualiza o cadastro. Para inativar é preciso informar a data de demissão;
    voltar para ativo/férias limpa a data de demissão.
    """
    invalidos = set(alteracoes) - set(_CAMPOS_EDITAVEIS)
    if invalidos:
        raise ValueError(f"Campos não editáveis: {', '.join(sorted(invalidos))}")
    if not alteracoes:
        return

    if 'name' in alteracoes and not (alteracoes['name'] or '').strip():
        raise ValueError("Nome é obrigatório.")
    if 'document' in alteracoes:
        alteracoes['document'] = _validar_documento(alteracoes['document'])
    for col, nome in (('salary', 'Salário'), ('vt_value', 'VT'), ('vr_value', 'VR')):
        if col in alteracoes:
            alteracoes[col] = _validar_valor(nome, alteracoes[col])
    for col in ('admission_date', 'resignation_date'):
        if col in alteracoes:
            alteracoes[col] = db._to_iso(alteracoes[col])
    if 'bank_info' in alteracoes:
        alteracoes['bank_info'] = json.dumps(alteracoes['bank_info'], ensure_ascii=False) if alteracoes['bank_info'] else None

    if 'status' in alteracoes:
        status = alteracoes['status']
        if status not in STATUS_FUNCIONARIO:
            raise ValueError(f"Status inválido: {status!r}")
        if status == 'inactive' and not alteracoes.get('resignation_date'):
            raise ValueError("Informe a data de demissão para inativar o funcionário.")
        if status != 'inactive':
            alteracoes['resignation_date'] = None

    colunas = ", ".join(f"{c}=?" for c in alteracoes)
    conn = conectar()
    try:
        with conn:
            cur = conn.execute(
                f"UPDATE employees SET {colunas}, updated_at=CURRENT_TIMESTAMP WHERE id=?",
                (*alteracoes.values(), func_id)
            )
            if cur.rowcount == 0:
                raise ValueError(f"Funcionário {func_id} não encontrado.")
    finally:
        conn.close()


def atualizar_foto(func_id: int, nome_arquivo: str, conteudo: bytes) -> str:
    """Grava a foto no armazenamento e troca a URL do funcionário (a foto anterior é removida)."""
    if not conteudo:
        raise ValueError("Arquivo vazio.")
    atual = buscar_detalhe_funcionario(func_id)
    if not atual:
        raise ValueError(f"Funcionário {func_id} não encontrado.")

    caminho = stg.montar_caminho(f"funcionarios/{func_id}", nome_arquivo)
    stg.salvar_objeto(caminho, conteudo)
    url = stg.gerar_url_assinada(caminho, stg.VALIDADE_ANEXO)

    conn = conectar()
    try:
        with conn:
            conn.execute("UPDATE employees SET photo_url=?, updated_at=CURRENT_TIMESTAMP WHERE id=?", (url, func_id))
    finally:
        conn.close()

    antigo = stg.caminho_da_url(atual.get('photo_url'))
    if antigo:
        stg.remover_objeto(antigo)
    return url


def contar_por_status() -> dict:
    conn = conectar()
    try:
        rows = conn.execute("SELECT status, COUNT(*) AS qtd FROM employees GROUP BY status").fetchall()
        contagem = {s: 0 for s in STATUS_FUNCIONARIO}
        contagem.update({r['status']: r['qtd'] for r in rows})
        return contagem
    finally:
        conn.close()
