import pytest

from chipjack.blackjack.hand import best_value
from chipjack.blackjack.rules import (
    Comparison,
    GameResult,
    Rules,
    calculate_chips_won,
    compare_hands,
    dealer_play,
    determine_game_result,
)
from chipjack.common.card import Card
from chipjack.common.deck import InfiniteDeck, StackedDeck


def hand(*labels):
    return [Card.parse(label) for label in labels]


class TestRules:
    def test_defaults(self):
        rules = Rules()
        assert rules.blackjack_payout == 1.5
        assert rules.dealer_stand_value == 17
        assert rules.max_dealer_cards == 12
        assert rules.starting_chips == 1000

    def test_round_trip_through_dict(self):
        rules = Rules(min_bet=5, max_bet=500)
        assert Rules.from_dict(rules.to_dict()).to_dict() == rules.to_dict()

    def test_from_dict_ignores_unknown_keys(self):
        rules = Rules.from_dict({"min_bet": 10, "deck_count": 6})
        assert rules.min_bet == 10

    def test_from_dict_none(self):
        assert Rules.from_dict(None).to_dict() == Rules().to_dict()

    @pytest.mark.parametrize(
        "amount,chips,expected",
        [
            (10, 100, None),
            (100, 100, None),
            (0, 100, "Bet must be positive"),
            (-5, 100, "Bet must be positive"),
            (101, 100, "Insufficient chips"),
        ],
    )
    def test_bet_error(self, amount, chips, expected):
        assert Rules().bet_error(amount, chips) == expected

    def test_bet_limits(self):
        rules = Rules(min_bet=5, max_bet=50)
        assert "minimum" in rules.bet_error(4, 100)
        assert "maximum" in rules.bet_error(51, 100)
        assert rules.bet_error(50, 100) is None


class TestDealerPlay:
    def test_stands_on_hard_17(self):
        initial = hand("10♠", "7♥")
        assert dealer_play(initial, StackedDeck([])) == tuple(initial)

    def test_stands_on_soft_17(self):
        initial = hand("A♠", "6♥")
        assert dealer_play(initial, StackedDeck([])) == tuple(initial)

    def test_hits_16(self):
        final = dealer_play(hand("10♠", "6♥"), StackedDeck.from_labels("5♦"))
        assert [str(card) for card in final] == ["10♠", "6♥", "5♦"]
        assert best_value(final).value == 21

    def test_stops_on_bust(self):
        deck = StackedDeck.from_labels("K♦", "2♣")
        final = dealer_play(hand("10♠", "6♥"), deck)
        assert best_value(final).value == 26
        assert deck.remaining == 1

    def test_draws_from_single_up_card(self):
        deck = StackedDeck.from_labels("2♣", "3♦", "A♥", "5♠")
        final = dealer_play(hand("9♠"), deck)
        # 9, 11, 14, hard 15 (the ace cannot count 11), then 20
        assert len(final) == 5
        assert best_value(final) == best_value(hand("K♠", "K♦"))

    def test_does_not_mutate_initial_hand(self):
        initial = hand("5♠")
        dealer_play(initial, StackedDeck.from_labels("10♦", "4♣"))
        assert len(initial) == 1

    def test_card_cap(self):
        rules = Rules(max_dealer_cards=4)
        deck = StackedDeck.from_labels("2♣", "2♦", "2♥", "2♠", "2♣")
        final = dealer_play(hand("2♠"), deck, rules)
        assert len(final) == 4
        assert deck.remaining == 2

    def test_custom_stand_value(self):
        rules = Rules(dealer_stand_value=19)
        final = dealer_play(hand("10♠", "8♥"), StackedDeck.from_labels("A♦"), rules)
        assert best_value(final).value == 19

    def test_random_play_always_finishes_at_17_or_more(self):
        deck = InfiniteDeck(seed=2024)
        for _ in range(2000):
            final = dealer_play([deck.draw()], deck)
            assert best_value(final).value >= 17
            assert len(final) <= 12


class TestCompareHands:
    def test_higher_total_wins(self):
        assert compare_hands(hand("10♠", "9♥"), hand("10♦", "8♣")) == Comparison(
            GameResult.WIN, 19, 18
        )

    def test_player_bust_loses_first(self):
        assert compare_hands(hand("10♠", "9♥", "5♦"), hand("10♦", "7♣")) == Comparison(
            GameResult.LOSS, 24, 17
        )

    def test_player_bust_loses_even_if_dealer_busts(self):
        result = compare_hands(hand("10♠", "9♥", "5♦"), hand("10♦", "7♣", "8♥"))
        assert result.result == GameResult.LOSS

    def test_dealer_bust_wins(self):
        assert compare_hands(hand("10♠", "8♥"), hand("10♦", "7♣", "8♥")) == Comparison(
            GameResult.WIN, 18, 25
        )

    def test_lower_total_loses(self):
        assert compare_hands(hand("10♠", "7♥"), hand("10♦", "9♣")).result == GameResult.LOSS

    def test_equal_totals_push(self):
        assert compare_hands(hand("10♠", "9♥"), hand("K♦", "9♣")).result == GameResult.PUSH

    def test_natural_against_three_card_21_pushes(self):
        result = compare_hands(hand("A♠", "K♥"), hand("7♦", "7♣", "7♥"))
        assert result == Comparison(GameResult.PUSH, 21, 21)


class TestChipsWon:
    @pytest.mark.parametrize(
        "result,expected",
        [
            (GameResult.BLACKJACK, 150),
            (GameResult.WIN, 100),
            (GameResult.PUSH, 0),
            (GameResult.LOSS, -100),
        ],
    )
    def test_payouts(self, result, expected):
        assert calculate_chips_won(100, result) == expected

    def test_accepts_result_strings(self):
        assert calculate_chips_won(100, "blackjack") == 150
        assert calculate_chips_won(100, "loss") == -100

    def test_blackjack_payout_rounds_down(self):
        assert calculate_chips_won(5, GameResult.BLACKJACK) == 7
        assert calculate_chips_won(1, GameResult.BLACKJACK) == 1

    def test_custom_payout(self):
        assert calculate_chips_won(10, GameResult.BLACKJACK, Rules(blackjack_payout=2)) == 20


class TestDetermineGameResult:
    def test_both_naturals_push(self):
        assert determine_game_result(21, 21, True, True, False, False) == GameResult.PUSH

    def test_player_natural(self):
        assert determine_game_result(21, 20, True, False, False, False) == GameResult.BLACKJACK

    def test_dealer_natural(self):
        assert determine_game_result(21, 21, False, True, False, False) == GameResult.LOSS

    def test_player_bust(self):
        assert determine_game_result(24, 26, False, False, True, True) == GameResult.LOSS

    def test_dealer_bust(self):
        assert determine_game_result(12, 22, False, False, False, True) == GameResult.WIN

    @pytest.mark.parametrize(
        "player,dealer,expected",
        [(20, 18, GameResult.WIN), (17, 19, GameResult.LOSS), (18, 18, GameResult.PUSH)],
    )
    def test_compare_scores(self, player, dealer, expected):
        assert determine_game_result(player, dealer, False, False, False, False) == expected
