import random
import unittest

from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.models import SystemConfig

class TestChip8AluInstructions(unittest.TestCase):
    def setUp(self):
        self.cpu, self.bus = SystemBuilder().build_system(SystemConfig(seed=7))
        self.state = self.cpu.get_state()

    def _run(self, *words):
        program = b"".join(w.to_bytes(2, "big") for w in words)
        self.cpu.load_program(program)
        for _ in words:
            self.cpu.step()

    def test_add_with_carry(self):
        # LD V0, #$FA / LD V1, #$0A / ADD V0, V1  (250 + 10)
        self._run(0x60FA, 0x610A, 0x8014)
        self.assertEqual(self.state.v[0], 4)
        self.assertEqual(self.state.vf, 1)

    def test_add_without_carry(self):
        self._run(0x600A, 0x6105, 0x8014)
        self.assertEqual(self.state.v[0], 15)
        self.assertEqual(self.state.vf, 0)

    def test_add_exactly_255_has_no_carry(self):
        self._run(0x60F0, 0x610F, 0x8014)
        self.assertEqual(self.state.v[0], 0xFF)
        self.assertEqual(self.state.vf, 0)

    def test_add_max_values_stays_in_byte_range(self):
        self._run(0x60FF, 0x61FF, 0x8014)
        self.assertEqual(self.state.v[0], 0xFE)
        self.assertEqual(self.state.vf, 1)

    def test_flag_wins_when_target_is_vf(self):
        # ADD VF, V1 : 結果0x30の後にキャリー0が書き込まれる
        self._run(0x6F10, 0x6120, 0x8F14)
        self.assertEqual(self.state.vf, 0)

    def test_sub_with_borrow(self):
        # 5 - 10
        self._run(0x6005, 0x610A, 0x8015)
        self.assertEqual(self.state.v[0], 251)
        self.assertEqual(self.state.vf, 0)

    def test_sub_without_borrow(self):
        self._run(0x600A, 0x6105, 0x8015)
        self.assertEqual(self.state.v[0], 5)
        self.assertEqual(self.state.vf, 1)

    def test_sub_equal_values_sets_flag(self):
        self._run(0x6005, 0x6105, 0x8015)
        self.assertEqual(self.state.v[0], 0)
        self.assertEqual(self.state.vf, 1)

    def test_sub_zero_minus_max(self):
        self._run(0x6000, 0x61FF, 0x8015)
        self.assertEqual(self.state.v[0], 1)
        self.assertEqual(self.state.vf, 0)

    def test_subn(self):
        # V0 := V1 - V0 = 10 - 3
        self._run(0x6003, 0x610A, 0x8017)
        self.assertEqual(self.state.v[0], 7)
        self.assertEqual(self.state.vf, 1)

    def test_subn_with_borrow(self):
        self._run(0x600A, 0x6103, 0x8017)
        self.assertEqual(self.state.v[0], 0xF9)
        self.assertEqual(self.state.vf, 0)

    def test_shr_uses_vy(self):
        self._run(0x6105, 0x8016)
        self.assertEqual(self.state.v[0], 2)
        self.assertEqual(self.state.vf, 1)
        self.assertEqual(self.state.v[1], 5)  # VYは変更されない

    def test_shl_uses_vy(self):
        self._run(0x6181, 0x801E)
        self.assertEqual(self.state.v[0], 0x02)
        self.assertEqual(self.state.vf, 1)
        self.assertEqual(self.state.v[1], 0x81)

    def test_shl_without_carry(self):
        self._run(0x6140, 0x801E)
        self.assertEqual(self.state.v[0], 0x80)
        self.assertEqual(self.state.vf, 0)

    def test_bitwise_operations(self):
        self._run(0x60F0, 0x610F, 0x8011)
        self.assertEqual(self.state.v[0], 0xFF)
        self._run(0x60F0, 0x610F, 0x8012)
        self.assertEqual(self.state.v[0], 0x00)
        self._run(0x60FF, 0x610F, 0x8013)
        self.assertEqual(self.state.v[0], 0xF0)

    def test_add_immediate_wraps_and_keeps_flag(self):
        self._run(0x6F05, 0x60FF, 0x7002)
        self.assertEqual(self.state.v[0], 0x01)
        self.assertEqual(self.state.vf, 0x05)

    def test_add_index(self):
        # LD I, $FFF / LD V0, #$FF / ADD I, V0
        self._run(0xAFFF, 0x60FF, 0xF01E)
        self.assertEqual(self.state.i, 0x10FE)
        self.assertEqual(self.state.vf, 0)

    def test_rnd_is_masked(self):
        for _ in range(20):
            self._run(0xC00F)
            self.assertLessEqual(self.state.v[0], 0x0F)
        self._run(0xC100)
        self.assertEqual(self.state.v[1], 0)

    def test_rnd_is_deterministic_for_a_seed(self):
        self._run(0xC0FF)
        expected = random.Random(7).randrange(0x100)
        self.assertEqual(self.state.v[0], expected)

if __name__ == '__main__':
    unittest.main()
