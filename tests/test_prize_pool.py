"""
Prize pool arithmetic: gross, rake, net, payouts and the high hand side pot.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from pokerpal.database.models import PayoutStructure, RakeType
from pokerpal.services.prize_pool import (
    PrizePoolCalculator, amount_owed, payout_percentages, payouts, round_whole
)


def make_tournament(**overrides):
    fields = dict(
        buy_in_amount=Decimal('100'),
        rebuy_amount=Decimal('100'),
        addon_amount=Decimal('50'),
        rake_type=RakeType.NONE,
        rake_amount=Decimal('0'),
        rebuy_rake_type=RakeType.NONE,
        rebuy_rake_amount=Decimal('0'),
        addon_rake_type=RakeType.NONE,
        addon_rake_amount=Decimal('0'),
        payout_structure=PayoutStructure.STANDARD,
        custom_payouts=None,
        manual_prize_pool=None,
        enable_high_hand=False,
        high_hand_amount=None,
        high_hand_rake_type=RakeType.NONE,
        high_hand_rake_amount=Decimal('0'),
        high_hand_payouts=1,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_registration(buy_ins=1, rebuys=0, addons=0, entering_high_hands=False):
    return SimpleNamespace(
        buy_ins=buy_ins, rebuys=rebuys, addons=addons, entering_high_hands=entering_high_hands
    )


class TestSummaries:
    def test_empty_tournament_is_all_zero(self):
        summary = PrizePoolCalculator.summarize(make_tournament(), [])

        assert summary.gross_total == 0
        assert summary.rake == 0
        assert summary.net_prize_pool == 0
        assert [line.amount for line in summary.payouts] == [0, 0, 0]
        assert summary.high_hand.per_winner == 0

    def test_totals_without_rake(self):
        registrations = [make_registration(rebuys=1), make_registration(addons=1), make_registration()]

        summary = PrizePoolCalculator.summarize(make_tournament(), registrations)

        assert (summary.total_buy_ins, summary.total_rebuys, summary.total_addons) == (3, 1, 1)
        assert summary.buy_in_total == Decimal('300')
        assert summary.rebuy_total == Decimal('100')
        assert summary.addon_total == Decimal('50')
        assert summary.gross_total == Decimal('450')
        assert summary.net_prize_pool == Decimal('450')

    def test_percentage_rake_applies_to_each_component(self):
        tournament = make_tournament(
            rake_type=RakeType.PERCENTAGE, rake_amount=Decimal('10'),
            rebuy_rake_type=RakeType.PERCENTAGE, rebuy_rake_amount=Decimal('20'),
        )
        registrations = [make_registration(rebuys=1) for _ in range(10)]

        summary = PrizePoolCalculator.summarize(tournament, registrations)

        assert summary.buy_in_rake == Decimal('100')
        assert summary.rebuy_rake == Decimal('200')
        assert summary.addon_rake == 0
        assert summary.net_prize_pool == Decimal('1700')

    def test_fixed_rake_is_charged_per_entry(self):
        tournament = make_tournament(
            rake_type=RakeType.FIXED, rake_amount=Decimal('15'),
            addon_rake_type=RakeType.FIXED, addon_rake_amount=Decimal('5'),
        )
        registrations = [make_registration(addons=2), make_registration(addons=1)]

        summary = PrizePoolCalculator.summarize(tournament, registrations)

        assert summary.buy_in_rake == Decimal('30')
        assert summary.addon_rake == Decimal('15')
        assert summary.net_prize_pool == Decimal('200') + Decimal('150') - Decimal('45')

    def test_net_never_goes_negative(self):
        tournament = make_tournament(rake_type=RakeType.FIXED, rake_amount=Decimal('500'))

        summary = PrizePoolCalculator.summarize(tournament, [make_registration()])

        assert summary.net_prize_pool == 0

    def test_manual_prize_pool_overrides_net(self):
        tournament = make_tournament(manual_prize_pool=Decimal('1000'))

        summary = PrizePoolCalculator.summarize(tournament, [make_registration()])

        assert summary.is_manual
        assert summary.gross_total == Decimal('100')
        assert summary.net_prize_pool == Decimal('1000')
        assert [line.amount for line in summary.payouts] == [Decimal('500'), Decimal('300'), Decimal('200')]

    def test_payouts_can_be_skipped(self):
        summary = PrizePoolCalculator.summarize(make_tournament(), [make_registration()], include_payouts=False)
        assert summary.payouts == []


class TestHighHand:
    def test_disabled_high_hand_pool_is_empty(self):
        pool = PrizePoolCalculator.high_hand_pool(make_tournament(), [make_registration(entering_high_hands=True)])
        assert pool.entrants == 0
        assert pool.net == 0

    def test_percentage_rake_split_between_winners(self):
        tournament = make_tournament(
            enable_high_hand=True,
            high_hand_amount=Decimal('20'),
            high_hand_rake_type=RakeType.PERCENTAGE,
            high_hand_rake_amount=Decimal('10'),
            high_hand_payouts=2,
        )
        registrations = [make_registration(entering_high_hands=True) for _ in range(5)] + [make_registration()]

        pool = PrizePoolCalculator.high_hand_pool(tournament, registrations)

        assert pool.entrants == 5
        assert pool.gross == Decimal('100')
        assert pool.rake == Decimal('10')
        assert pool.net == Decimal('90')
        assert pool.per_winner == Decimal('45')

    def test_fixed_rake_is_flat_and_capped(self):
        tournament = make_tournament(
            enable_high_hand=True,
            high_hand_amount=Decimal('10'),
            high_hand_rake_type=RakeType.FIXED,
            high_hand_rake_amount=Decimal('25'),
        )

        pool = PrizePoolCalculator.high_hand_pool(tournament, [make_registration(entering_high_hands=True)])

        assert pool.rake == Decimal('10')
        assert pool.net == 0

    def test_non_positive_payout_count_treated_as_one(self):
        tournament = make_tournament(enable_high_hand=True, high_hand_amount=Decimal('10'), high_hand_payouts=0)

        pool = PrizePoolCalculator.high_hand_pool(tournament, [make_registration(entering_high_hands=True)])

        assert pool.payouts == 1
        assert pool.per_winner == Decimal('10')


class TestPayoutStructures:
    @pytest.mark.parametrize('structure, expected', [
        (PayoutStructure.STANDARD, [0.50, 0.30, 0.20]),
        (PayoutStructure.TOP3, [0.50, 0.30, 0.20]),
        (PayoutStructure.TOP5, [0.40, 0.25, 0.20, 0.10, 0.05]),
        ('top9', [0.30, 0.20, 0.15, 0.12, 0.09, 0.06, 0.04, 0.02, 0.02]),
        ('unknown', [0.50, 0.30, 0.20]),
    ])
    def test_builtin_structures(self, structure, expected):
        assert payout_percentages(structure) == expected

    def test_top8_sums_to_whole_pool(self):
        assert sum(payout_percentages(PayoutStructure.TOP8)) == pytest.approx(1.0)

    def test_custom_percent_values_are_scaled(self):
        assert payout_percentages(PayoutStructure.CUSTOM, '[60, 40]') == [0.6, 0.4]

    def test_custom_objects_with_percentage_key(self):
        raw = '[{"position": 1, "percentage": 0.7}, {"position": 2, "percentage": 0.3}]'
        assert payout_percentages('custom', raw) == [0.7, 0.3]

    @pytest.mark.parametrize('raw', [None, '', 'not json', '{"a": 1}', '["x"]'])
    def test_invalid_custom_falls_back_to_standard(self, raw):
        assert payout_percentages('custom', raw) == [0.50, 0.30, 0.20]

    def test_amounts_round_to_whole_units(self):
        lines = payouts(Decimal('1001'), [0.5, 0.3, 0.2])

        assert [line.position for line in lines] == [1, 2, 3]
        assert [line.amount for line in lines] == [Decimal('501'), Decimal('300'), Decimal('200')]

    def test_round_whole_rounds_half_up(self):
        assert round_whole(Decimal('2.5')) == Decimal('3')
        assert round_whole(Decimal('2.49')) == Decimal('2')


class TestAmountOwed:
    def test_buy_in_only(self):
        tournament = make_tournament(enable_high_hand=True, high_hand_amount=Decimal('20'))
        assert amount_owed(tournament, make_registration()) == Decimal('100')

    def test_high_hand_entry_added_when_offered(self):
        tournament = make_tournament(enable_high_hand=True, high_hand_amount=Decimal('20'))
        assert amount_owed(tournament, make_registration(entering_high_hands=True)) == Decimal('120')

    def test_high_hand_entry_ignored_when_not_offered(self):
        tournament = make_tournament(high_hand_amount=Decimal('20'))
        assert amount_owed(tournament, make_registration(entering_high_hands=True)) == Decimal('100')
