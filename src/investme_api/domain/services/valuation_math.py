"""Cálculos de valuation por fluxo de caixa descontado e por múltiplos."""
from investme_api.domain.exceptions import ValidationError

SENSITIVITY_STEPS = (-0.01, -0.005, 0.0, 0.005, 0.01)


def wacc(cost_of_equity: float, equity_weight: float, cost_of_debt: float, debt_weight: float, tax_rate: float) -> float:
    return cost_of_equity * equity_weight + cost_of_debt * debt_weight * (1 - tax_rate)


def _enterprise_value(free_cash_flows: list[float], rate: float, growth: float) -> tuple[list[float], float, float]:
    if growth >= rate:
        raise ValidationError("Taxa de crescimento na perpetuidade deve ser menor que o WACC")
    present_values = [fcf / (1 + rate) ** (year + 1) for year, fcf in enumerate(free_cash_flows)]
    terminal_value = free_cash_flows[-1] * (1 + growth) / (rate - growth)
    pv_terminal = terminal_value / (1 + rate) ** len(free_cash_flows)
    return present_values, terminal_value, pv_terminal


def calculate_dcf(data: dict) -> dict:
    years = data["projection_years"]
    series = ("revenues", "costs", "operating_expenses", "capex", "working_capital_change")
    for name in series:
        if len(data[name]) != years:
            raise ValidationError(f"'{name}' deve ter {years} valores")

    tax_rate = data["tax_rate"]
    rate = wacc(data["cost_of_equity"], data["equity_weight"], data["cost_of_debt"], data["debt_weight"], tax_rate)
    growth = data["terminal_growth_rate"]
    net_debt = data.get("net_debt") or 0.0

    free_cash_flows = []
    for i in range(years):
        ebit = data["revenues"][i] - data["costs"][i] - data["operating_expenses"][i]
        nopat = ebit * (1 - tax_rate)
        free_cash_flows.append(nopat - data["capex"][i] - data["working_capital_change"][i])

    present_values, terminal_value, pv_terminal = _enterprise_value(free_cash_flows, rate, growth)
    enterprise_value = sum(present_values) + pv_terminal

    sensitivity = []
    for wacc_step in SENSITIVITY_STEPS:
        row = []
        for growth_step in SENSITIVITY_STEPS:
            adj_rate, adj_growth = rate + wacc_step, growth + growth_step
            if adj_growth >= adj_rate:
                row.append(None)
                continue
            pvs, _, pv_tv = _enterprise_value(free_cash_flows, adj_rate, adj_growth)
            row.append(sum(pvs) + pv_tv - net_debt)
        sensitivity.append(row)

    return {
        "wacc": rate,
        "free_cash_flows": free_cash_flows,
        "present_values": present_values,
        "terminal_value": terminal_value,
        "present_value_of_terminal_value": pv_terminal,
        "enterprise_value": enterprise_value,
        "equity_value": enterprise_value - net_debt,
        "sensitivity_matrix": sensitivity,
    }


_MULTIPLE_PAIRS = {
    "pe_valuation": ("pe_multiple", "net_income"),
    "ev_ebitda_valuation": ("ev_ebitda_multiple", "ebitda"),
    "pv_vp_valuation": ("pv_vp_multiple", "book_value"),
    "ev_revenue_valuation": ("ev_revenue_multiple", "revenue"),
}


def calculate_multiples(data: dict) -> dict:
    results = {}
    for key, (multiple, base) in _MULTIPLE_PAIRS.items():
        if data.get(multiple) and data.get(base):
            results[key] = data[multiple] * data[base]
    if not results:
        raise ValidationError("Informe ao menos um par múltiplo/base")

    average = sum(results.values()) / len(results)
    liquidity_discount = data.get("liquidity_discount") or 0.0
    control_premium = data.get("control_premium") or 0.0
    results["average_valuation"] = average
    results["adjusted_valuation"] = average * (1 - liquidity_discount) * (1 + control_premium)
    return results
