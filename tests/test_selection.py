import unittest

from grouptable.selection import SelectionState


class TestSelectionState(unittest.TestCase):
    def test_click_same_cell_toggles_back_to_idle(self):
        state = SelectionState()
        self.assertTrue(state.is_idle)
        self.assertTrue(state.toggle(("r1", 0)))
        self.assertTrue(state.is_active(("r1", 0)))
        self.assertFalse(state.toggle(("r1", 0)))
        self.assertTrue(state.is_idle)

    def test_click_other_cell_moves_selection(self):
        state = SelectionState()
        state.toggle(("r1", 0))
        self.assertTrue(state.toggle(("r2", 0)))
        self.assertEqual(state.active, ("r2", 0))
        self.assertFalse(state.is_active(("r1", 0)))

    def test_clear(self):
        state = SelectionState()
        state.toggle(("r1", 1))
        state.clear()
        self.assertIsNone(state.active)


if __name__ == "__main__":
    unittest.main()
