from datetime import date, datetime

def format_brl(val):
    if val is None: return "R$ 0,00"
    return f"R$ {val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")

def parse_data(valor):
    """Aceita 'YYYY-MM-DD' (com ou sem sufixo de hora), date ou datetime. Retorna date ou None."""
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    try:
        return datetime.strptime(str(valor).split('T')[0].split(' ')[0], '%Y-%m-%d').date()
    except ValueError:
        return None

def formata_data(data_vencimento):
    dt = parse_data(data_vencimento)
    if dt is None: return "-"
    return dt.strftime('%d/%m/%Y')

def get_status_visual(data_vencimento):
    dt_venc = parse_data(data_vencimento)
    if dt_venc is None:
        return "-"

    hoje = date.today()
    dt_fmt = dt_venc.strftime('%d/%m')

    if dt_venc < hoje:
        return f"🚨 :red[**{dt_fmt}**]" # Atrasado
    elif dt_venc == hoje:
        return f"⚠️ :orange[**{dt_fmt}**]" # Vence hoje
    else:
        return dt_fmt # No prazo
