"""Tests for control flow instructions."""

import pytest
from chipjax import create_state, execute, Quirks, Status
from conftest import run


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = run(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = run(fresh_state, 0x6010, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_past_memory(self, fresh_state):
        """BNNN - NNN + V0 is not masked and may leave memory."""
        state = run(fresh_state, 0x60FF, 0xBFFF)
        assert state.pc == 0xFFF + 0xFF

    def test_jump_with_register_offset_quirk(self):
        """BXNN - jump_uses_vx reads X from the address."""
        state = create_state(quirks=Quirks(jump_uses_vx=True))
        state = run(state, 0x6010, 0x6230, 0xB250)
        assert state.pc == 0x280  # 0x250 + V2


class TestSkipInstructions:
    """Test all skip instruction variants."""

    @pytest.mark.parametrize("value, instruction, skipped", [
        (0x42, 0x3542, True),   # SE V5, 0x42
        (0x41, 0x3542, False),
        (0x10, 0x4520, True),   # SNE V5, 0x20
        (0x20, 0x4520, False),
        (0xFF, 0x35FF, True),
        (0x00, 0x3500, True),
    ])
    def test_skip_immediate(self, fresh_state, value, instruction, skipped):
        """3XNN/4XNN - compare VX with an immediate."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(value))
        initial_pc = state.pc

        state = run(state, instruction)

        assert state.pc == initial_pc + (2 if skipped else 0)

    @pytest.mark.parametrize("vx, vy, instruction, skipped", [
        (0x55, 0x55, 0x5120, True),   # SE V1, V2
        (0x55, 0x44, 0x5120, False),
        (0xAA, 0xBB, 0x9120, True),   # SNE V1, V2
        (0xCC, 0xCC, 0x9120, False),
    ])
    def test_skip_register(self, fresh_state, vx, vy, instruction, skipped):
        """5XY0/9XY0 - compare VX with VY."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(vx).at[2].set(vy))
        initial_pc = state.pc

        state = run(state, instruction)

        assert state.pc == initial_pc + (2 if skipped else 0)

    @pytest.mark.parametrize("instruction", [0x5121, 0x512F, 0x9121, 0x9128])
    def test_skip_register_bad_low_nibble(self, fresh_state, instruction):
        """5XYN/9XYN with N != 0 are unknown and never skip."""
        initial_pc = fresh_state.pc

        state, signals = execute(fresh_state, instruction)

        assert int(signals.status) == Status.UNKNOWN_OPCODE
        assert state.pc == initial_pc


class TestKeySkips:
    """Test EX9E/EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - skip when key VX is down."""
        state = run(fresh_state, 0x6005)
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = run(state, 0xE09E)

        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_released(self, fresh_state):
        """EX9E - no skip when key VX is up."""
        state = run(fresh_state, 0x6005)
        initial_pc = state.pc

        state = run(state, 0xE09E)

        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - skip when key VX is up."""
        state = run(fresh_state, 0x6005)
        initial_pc = state.pc

        state = run(state, 0xE0A1)

        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_not_pressed_but_down(self, fresh_state):
        """EXA1 - no skip when key VX is down."""
        state = run(fresh_state, 0x600C)
        state = state.replace(keypad=state.keypad.at[0xC].set(True))
        initial_pc = state.pc

        state = run(state, 0xE0A1)

        assert state.pc == initial_pc

    def test_unknown_key_instruction(self, fresh_state):
        """EXNN other than 9E/A1 is reported."""
        state, signals = execute(fresh_state, 0xE0FF)

        assert int(signals.status) == Status.UNKNOWN_OPCODE
        assert state.pc == fresh_state.pc
