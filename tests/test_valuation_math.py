import pytest

from investme_api.domain.exceptions import ValidationError
from investme_api.domain.services.valuation_math import calculate_dcf, calculate_multiples, wacc


def _dcf(**overrides):
    data = {
        "projection_years": 2,
        "revenues": [1000.0, 1100.0],
        "costs": [400.0, 440.0],
        "operating_expenses": [200.0, 220.0],
        "capex": [50.0, 50.0],
        "working_capital_change": [10.0, 10.0],
        "tax_rate": 0.25,
        "cost_of_equity": 0.15,
        "equity_weight": 0.6,
        "cost_of_debt": 0.10,
        "debt_weight": 0.4,
        "terminal_growth_rate": 0.03,
        "net_debt": 100.0,
    }
    data.update(overrides)
    return data


def test_wacc():
    assert wacc(0.15, 0.6, 0.10, 0.4, 0.25) == pytest.approx(0.12)


def test_dcf_free_cash_flows_and_equity():
    result = calculate_dcf(_dcf())
    # EBIT 400 -> NOPAT 300 -> FCF 240; EBIT 440 -> NOPAT 330 -> FCF 270
    assert result["free_cash_flows"] == pytest.approx([240.0, 270.0])
    assert result["present_values"][0] == pytest.approx(240.0 / 1.12)
    terminal = 270.0 * 1.03 / (0.12 - 0.03)
    assert result["terminal_value"] == pytest.approx(terminal)
    assert result["enterprise_value"] == pytest.approx(240 / 1.12 + 270 / 1.12 ** 2 + terminal / 1.12 ** 2)
    assert result["equity_value"] == pytest.approx(result["enterprise_value"] - 100.0)


def test_dcf_sensitivity_matrix_center_matches_equity():
    result = calculate_dcf(_dcf())
    matrix = result["sensitivity_matrix"]
    assert len(matrix) == 5 and all(len(row) == 5 for row in matrix)
    assert matrix[2][2] == pytest.approx(result["equity_value"])


def test_dcf_rejects_growth_above_wacc():
    with pytest.raises(ValidationError):
        calculate_dcf(_dcf(terminal_growth_rate=0.2))


def test_dcf_rejects_series_length_mismatch():
    with pytest.raises(ValidationError):
        calculate_dcf(_dcf(capex=[50.0]))


def test_multiples_average_and_adjustment():
    result = calculate_multiples({
        "pe_multiple": 10, "net_income": 100,
        "ev_ebitda_multiple": 6, "ebitda": 200,
        "liquidity_discount": 0.2, "control_premium": 0.1,
    })
    assert result["pe_valuation"] == 1000
    assert result["ev_ebitda_valuation"] == 1200
    assert "pv_vp_valuation" not in result
    assert result["average_valuation"] == pytest.approx(1100)
    assert result["adjusted_valuation"] == pytest.approx(1100 * 0.8 * 1.1)


def test_multiples_require_at_least_one_pair():
    with pytest.raises(ValidationError):
        calculate_multiples({"pe_multiple": 10})
