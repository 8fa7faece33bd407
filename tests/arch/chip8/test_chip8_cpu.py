# tests/arch/chip8/test_chip8_cpu.py
"""
Chip8Cpuのサイクル駆動、ロード、リセット、キー入力待ち、タイマー進行の検証。
"""
import pytest

from chip8_tracer.arch.chip8 import Chip8Cpu, MemoryLayout, RunState
from chip8_tracer.arch.chip8.font import FONT_SET
from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.models import SystemConfig, TimingConfig
from chip8_tracer.transport.bus import Bus, RAM, BusAccessType
from chip8_tracer.common.errors import MemoryAccessError, ProgramNotLoadedError, RomLoadError, UnknownOpcodeWarning


def words_to_bytes(*words):
    return b"".join(w.to_bytes(2, "big") for w in words)

# @intent:test_suite CPUの外部インターフェースと実行モデルを検証します。

class TestProgramLoading:
    def test_step_before_load_raises(self, chip8):
        cpu, _ = chip8
        with pytest.raises(ProgramNotLoadedError):
            cpu.step()

    def test_empty_program_is_rejected(self, chip8):
        cpu, _ = chip8
        with pytest.raises(RomLoadError):
            cpu.load_program(b"")
        assert not cpu.program_loaded

    # @intent:test_case_capacity 容量超過のロードは失敗し、メモリを一切変更しないことを検証します。
    def test_oversized_program_is_rejected_without_mutation(self, chip8):
        cpu, bus = chip8
        bus.load(0x200, 0xAB)
        with pytest.raises(RomLoadError, match="exceeds"):
            cpu.load_program(bytes(0xE01))
        assert bus.peek(0x200) == 0xAB
        assert not cpu.program_loaded

    def test_program_filling_whole_capacity(self, chip8):
        cpu, bus = chip8
        cpu.load_program(bytes([0x12]) * 0xE00)
        assert cpu.program_loaded
        assert bus.peek(0xFFF) == 0x12
        assert cpu.get_state().pc == 0x200

    def test_load_zeroes_rest_of_program_region(self, chip8):
        cpu, bus = chip8
        cpu.load_program(bytes([0xFF]) * 8)
        cpu.load_program(bytes([0x12, 0x00]))
        assert bus.peek(0x202) == 0

    def test_font_is_present_after_construction(self, chip8):
        _, bus = chip8
        assert bytes(bus.peek(a) for a in range(len(FONT_SET))) == FONT_SET

    def test_custom_program_origin(self):
        config = SystemConfig()
        config.memory.program_origin = 0x300
        cpu, bus = SystemBuilder().build_system(config)
        cpu.load_program(words_to_bytes(0x6007))
        cpu.step()
        assert cpu.get_state().v[0] == 7
        assert cpu.get_state().pc == 0x302
        assert cpu.layout.program_capacity == 0xD00

    def test_invalid_rates(self):
        bus = Bus()
        bus.register_device(0, 0xFFF, RAM(0x1000))
        with pytest.raises(ValueError):
            Chip8Cpu(bus, cpu_hz=0)
        with pytest.raises(ValueError):
            Chip8Cpu(bus, timer_hz=-1)
        with pytest.raises(ValueError):
            Chip8Cpu(bus, layout=MemoryLayout(program_origin=0x20))


class TestExecution:
    # @intent:test_case_scenario 6005 610A 8014 の実行結果を検証します。
    def test_add_program(self, load_words):
        cpu = load_words(0x6005, 0x610A, 0x8014)
        for _ in range(3):
            cpu.step()
        state = cpu.get_state()
        assert state.v[0] == 15
        assert state.v[1] == 10
        assert state.vf == 0
        assert state.pc == 0x206

    def test_snapshot_records_fetch_and_is_immutable(self, load_words):
        cpu = load_words(0x6005, 0x6006)
        snapshot = cpu.step()
        assert snapshot.operation.text() == "LD V0, #$05"
        assert snapshot.metadata.description == "0x0200: LD V0, #$05"
        assert [(a.address, a.data, a.access_type) for a in snapshot.bus_activity] == [
            (0x200, 0x60, BusAccessType.READ),
            (0x201, 0x05, BusAccessType.READ),
        ]
        cpu.step()
        assert snapshot.state.v[0] == 5
        assert snapshot.state.pc == 0x202

    def test_register_map(self, load_words):
        cpu = load_words(0x6A42, 0xA123)
        cpu.step()
        cpu.step()
        registers = cpu.get_register_map()
        assert registers["VA"] == 0x42
        assert registers["I"] == 0x123
        assert registers["PC"] == 0x204
        assert set(registers) >= {"V0", "VF", "SP", "DT", "ST"}
        names = [r.name for group in cpu.get_register_layout() for r in group.registers]
        assert set(names) == set(registers)

    # @intent:test_case_reset リセットで全状態が初期化され、再ロードが必要になることを検証します。
    def test_reset(self, load_words, chip8):
        cpu, bus = chip8
        load_words(0x6005, 0xA300, 0xF055, 0x6000, 0xF029, 0xD005)
        for _ in range(6):
            cpu.step()
        cpu.keypad.set_key(3, True)

        cpu.reset()

        state = cpu.get_state()
        assert state.v == [0] * 16
        assert state.i == 0
        assert state.pc == 0x200
        assert bus.peek(0x300) == 0
        assert bus.peek(0x000) == FONT_SET[0]
        assert cpu.display.lit_count() == 0
        assert not cpu.keypad.is_pressed(3)
        assert not cpu.program_loaded
        with pytest.raises(ProgramNotLoadedError):
            cpu.step()

    def test_instances_are_independent(self):
        builder = SystemBuilder()
        cpu_a, _ = builder.build_system(SystemConfig())
        cpu_b, _ = builder.build_system(SystemConfig())
        cpu_a.load_program(words_to_bytes(0x6001))
        cpu_b.load_program(words_to_bytes(0x6002))
        cpu_a.step()
        cpu_b.step()
        assert cpu_a.get_state().v[0] == 1
        assert cpu_b.get_state().v[0] == 2

    def test_disassemble_delegates_to_bus(self, load_words):
        cpu = load_words(0x00E0, 0x1200)
        assert cpu.disassemble(0x200, 4) == [
            (0x200, "00 E0", "CLS"),
            (0x202, "12 00", "JP $200"),
        ]


class TestKeyWait:
    # @intent:test_case_wait 待機中はPCを進めず、新たに押されたキーをVXに格納することを検証します。
    def test_wait_for_key(self, load_words):
        cpu = load_words(0xF30A, 0x1202)
        cpu.step()
        state = cpu.get_state()
        assert state.run_state is RunState.WAITING_FOR_KEY
        assert state.pc == 0x202

        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "WAIT (suspended)"
        assert snapshot.bus_activity == []
        assert state.pc == 0x202

        cpu.keypad.set_key(7, True)
        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "KEY"
        assert state.v[3] == 7
        assert state.run_state is RunState.RUNNING
        assert state.pc == 0x202

        cpu.step()
        assert state.pc == 0x202

    def test_key_held_before_wait_is_not_accepted(self, load_words):
        cpu = load_words(0xF30A)
        cpu.keypad.set_key(5, True)
        cpu.step()
        cpu.step()
        assert cpu.get_state().waiting_for_key

        cpu.keypad.set_key(5, False)
        cpu.step()
        cpu.keypad.set_key(5, True)
        cpu.step()
        assert not cpu.get_state().waiting_for_key
        assert cpu.get_state().v[3] == 5

    def test_timers_tick_while_waiting(self, load_words):
        cpu = load_words(0x600A, 0xF015, 0xF00A)
        for _ in range(3):
            cpu.step()
        cpu.run_for(1.0)
        state = cpu.get_state()
        assert state.waiting_for_key
        assert state.delay_timer == 0


class TestTiming:
    # @intent:test_case_timer 1秒の仮想時間でタイマーが60前後減ることを、命令レートに依らず検証します。
    @pytest.mark.parametrize("cpu_hz", [500.0, 700.0, 2000.0])
    def test_delay_timer_is_independent_of_cpu_rate(self, cpu_hz):
        config = SystemConfig(timing=TimingConfig(cpu_hz=cpu_hz, timer_hz=60.0))
        cpu, _ = SystemBuilder().build_system(config)
        # LD V0, 120 / LD DT, V0 / JP $204
        cpu.load_program(words_to_bytes(0x6078, 0xF015, 0x1204))
        cpu.step()
        cpu.step()
        assert cpu.get_state().delay_timer == 120

        executed = cpu.run_for(1.0)

        assert executed == int(cpu_hz)
        assert abs(cpu.get_state().delay_timer - 60) <= 1

    def test_run_for_carries_fractional_cycles(self, load_words):
        cpu = load_words(0x1200)
        assert cpu.run_for(0.001) == 0   # 0.7サイクル
        assert cpu.run_for(0.001) == 1   # 累計1.4サイクル
        assert cpu.cycle_count == 1

    def test_sound_timer_expires(self, load_words):
        cpu = load_words(0x6002, 0xF018, 0x1204)
        cpu.step()
        cpu.step()
        assert cpu.is_sound_active()
        cpu.run_for(0.1)
        assert not cpu.is_sound_active()
        assert cpu.get_state().sound_timer == 0


class TestProgramCounterBounds:
    # @intent:test_case_pc_end メモリ終端の命令を実行した後のフェッチが致命的エラーとしてラッチされることを検証します。
    def test_fetch_past_end_of_memory_faults(self, chip8):
        cpu, _ = chip8
        program = bytearray(0xE00)
        program[0:2] = words_to_bytes(0x1FFE)       # JP $FFE
        program[0xDFE:0xE00] = words_to_bytes(0x6007)  # $FFE: LD V0, $07
        cpu.load_program(bytes(program))

        cpu.step()
        assert cpu.get_state().pc == 0xFFE
        cpu.step()
        assert cpu.get_state().pc == 0x1000
        assert cpu.get_state().v[0] == 7

        with pytest.raises(MemoryAccessError, match="not mapped"):
            cpu.step()
        assert isinstance(cpu.fault, MemoryAccessError)

        halted = cpu.step()
        assert halted.operation.mnemonic == "HALT (fault)"
        assert cpu.get_state().pc == 0x1000

    def test_jump_with_offset_past_end_of_memory_faults(self, load_words):
        cpu = load_words(0x60FF, 0xBF10)  # LD V0, $FF / JP V0, $F10
        cpu.step()
        cpu.step()
        assert cpu.get_state().pc == 0x100F
        with pytest.raises(MemoryAccessError):
            cpu.step()
        assert isinstance(cpu.fault, MemoryAccessError)

    def test_reset_clears_pc_fault(self, load_words):
        cpu = load_words(0x1FFE)
        cpu.step()
        with pytest.warns(UnknownOpcodeWarning):
            cpu.step()  # $FFE: 0000
        with pytest.raises(MemoryAccessError):
            cpu.step()
        cpu.reset()
        assert cpu.fault is None
        assert not cpu.program_loaded
