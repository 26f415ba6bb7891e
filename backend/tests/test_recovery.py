"""Tests for the recovery strategy optimizer."""
import pytest

from fundrisk.engine.recovery import (
    PolicyFactors,
    analyze_liquidation_cost_benefit,
    apply_policy_overrides,
    optimize,
    rank_options,
    select,
)
from fundrisk.models.loan import CollateralType, CooperationLevel
from fundrisk.models.recovery import RecoveryCase, RecoveryStrategy


def _make_case(**overrides) -> RecoveryCase:
    defaults = dict(
        loan_id="R001",
        outstanding_balance=100_000,
        collateral_value=120_000,
        collateral_type=CollateralType.real_estate,
        days_past_due=90,
        cooperation_level=CooperationLevel.cooperative,
        loan_to_value=75,
    )
    defaults.update(overrides)
    return RecoveryCase(**defaults)


def _strategies(options):
    return [o.strategy for o in options]


def test_ranked_by_expected_value():
    ranked = rank_options(_make_case())
    assert _strategies(ranked) == [
        RecoveryStrategy.collateral_foreclosure,
        RecoveryStrategy.negotiated_settlement,
        RecoveryStrategy.legal_judgment,
    ]
    foreclosure, settlement, legal = ranked
    assert foreclosure.expected_value == pytest.approx(60_000)
    assert settlement.estimated_recovery == pytest.approx(85_000)
    assert settlement.probability == pytest.approx(0.70)
    assert settlement.expected_value == pytest.approx(56_000)
    assert legal.expected_value == pytest.approx(26_000)


def test_cooperative_early_borrower_steered_to_settlement():
    case = _make_case()
    ranked = rank_options(case)
    option, override, reason = apply_policy_overrides(ranked, PolicyFactors.from_case(case))
    assert option.strategy == RecoveryStrategy.negotiated_settlement
    assert override
    assert "settlement" in reason


def test_no_override_when_policy_choice_already_top():
    case = _make_case(cooperation_level=CooperationLevel.non_cooperative, days_past_due=150)
    ranked = rank_options(case)
    selection = select(ranked, PolicyFactors.from_case(case))
    assert selection.option is ranked[0]
    assert selection.option.strategy == RecoveryStrategy.collateral_foreclosure
    assert not selection.policy_override


def test_non_cooperative_secured_borrower_steered_to_foreclosure():
    case = _make_case(
        collateral_value=60_000, days_past_due=60,
        cooperation_level=CooperationLevel.non_cooperative,
    )
    ranked = rank_options(case)
    assert ranked[0].strategy == RecoveryStrategy.negotiated_settlement
    selection = select(ranked, PolicyFactors.from_case(case))
    assert selection.option.strategy == RecoveryStrategy.collateral_foreclosure
    assert selection.policy_override
    assert selection.rationale[0].startswith("Non-cooperative borrower")


def test_neutral_borrower_takes_top_option():
    case = _make_case(cooperation_level=CooperationLevel.neutral)
    ranked = rank_options(case)
    selection = select(ranked, PolicyFactors.from_case(case))
    assert selection.option is ranked[0]
    assert not selection.policy_override
    assert len(selection.milestones) == 4


def test_unsecured_long_delinquency_adds_charge_off():
    case = _make_case(
        outstanding_balance=50_000, collateral_value=0,
        collateral_type=CollateralType.unsecured, days_past_due=400,
        cooperation_level=CooperationLevel.neutral,
    )
    ranked = rank_options(case)
    assert _strategies(ranked) == [
        RecoveryStrategy.legal_judgment,
        RecoveryStrategy.negotiated_settlement,
        RecoveryStrategy.charge_off,
    ]
    # unsecured settlement recovers 85% of the balance
    assert ranked[1].estimated_recovery == pytest.approx(42_500)
    plan = optimize(case)
    assert plan.liquidation is None
    assert any(r.category == "Security Risk" for r in plan.risks)


def test_empty_ranking_rejected():
    with pytest.raises(ValueError):
        apply_policy_overrides([], PolicyFactors.from_case(_make_case()))


def test_optimize_full_plan():
    plan = optimize(_make_case())
    assert plan.loan_id == "R001"
    assert plan.selection.option.strategy == RecoveryStrategy.negotiated_settlement
    assert [s.name for s in plan.projection.scenarios] == ["optimistic", "expected", "conservative"]
    # 0.25 x 96,000 + 0.5 x 80,000 + 0.25 x 56,000
    assert plan.projection.expected_amount == pytest.approx(78_000)
    assert plan.liquidation is not None
    assert plan.defaults_applied == []


def test_missing_inputs_recorded():
    plan = optimize(RecoveryCase(loan_id="R002"))
    assert "outstanding_balance" in plan.defaults_applied
    assert "days_past_due" in plan.defaults_applied
    assert plan.projection.recovery_rate is None


def test_liquidation_cost_benefit():
    analysis = analyze_liquidation_cost_benefit(200_000, 150_000)
    assert analysis.cost_breakdown["appraisal"] == pytest.approx(4_000)
    assert analysis.total_estimated_costs == pytest.approx(34_000)
    by_name = {s.name: s for s in analysis.scenarios}
    assert by_name["expected"].net_recovery == pytest.approx(106_000)
    assert analysis.expected_net_recovery == pytest.approx(105_150)
    assert analysis.recommendation == "Proceed with liquidation"


def test_liquidation_appraisal_cost_capped():
    analysis = analyze_liquidation_cost_benefit(1_000_000, 500_000)
    assert analysis.cost_breakdown["appraisal"] == pytest.approx(5_000)
