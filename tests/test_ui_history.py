from pertcalc.estimation.pert import calculate
from pertcalc.estimation.types import EstimateInput
from pertcalc.storage.history_store import HistoryEntry
from pertcalc.ui.history import IMPORTED_KEY, claim_upload, history_frame


class TestClaimUpload:
    def test_first_sight_is_claimed(self):
        state = {}
        assert claim_upload(state, "file-1") is True
        assert state[IMPORTED_KEY] == "file-1"

    def test_same_upload_on_rerun_is_skipped(self):
        state = {}
        claim_upload(state, "file-1")
        assert claim_upload(state, "file-1") is False
        assert claim_upload(state, "file-1") is False

    def test_new_upload_is_claimed(self):
        state = {}
        claim_upload(state, "file-1")
        assert claim_upload(state, "file-2") is True
        assert claim_upload(state, "file-1") is True


def test_history_frame_shows_zero_when_p90_missing():
    inp = EstimateInput(O=2, M=4, P=10, percentiles=(80,))
    entry = HistoryEntry(input=inp, result=calculate(inp), created_at="2024-01-01T10:00:00+00:00")

    df = history_frame([entry], "UTC")

    assert list(df.columns) == ["Date", "O", "M", "P", "Unit", "λ", "Mean", "σ", "P90"]
    row = df.iloc[0]
    assert row["Date"] == "01/01/2024 10:00:00"
    assert row["P90"] == 0.0
    assert row["Mean"] == 4.67
