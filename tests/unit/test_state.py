import uuid

from fragmentbridge.state import issue_state, states_match


def test_issue_state_is_uuid4():
    state = issue_state()
    assert uuid.UUID(state).version == 4


def test_issue_state_unique():
    states = {issue_state() for _ in range(1000)}
    assert len(states) == 1000


class TestStatesMatch:
    """Whole-value comparison of state tokens."""

    def test_exact_match(self):
        state = issue_state()
        assert states_match(state, state)

    def test_mismatch(self):
        assert not states_match(issue_state(), issue_state())

    def test_prefix_and_suffix_rejected(self):
        state = issue_state()
        assert not states_match(state, state[:-1])
        assert not states_match(state, state + 'x')
        assert not states_match(state, 'x' + state)

    def test_missing_values_rejected(self):
        assert not states_match('abc', None)
        assert not states_match('abc', '')
        assert not states_match(None, None)
        assert not states_match('', '')
