"""Tests for machine state, fetch/step, timers and ROM loading."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from chipjax import (
    create_state, fetch, step, run_steps, run_frame, tick_timers, set_keypad, consume_audio,
    load_rom, load_rom_file, raise_for_status, Status, Quirks,
    RomLoadError, RomTooLarge, UnknownOpcode, StackOverflow, StackUnderflow,
)
from chipjax.constants import FONT_DATA, MAX_ROM_SIZE, PROGRAM_START
from chipjax.signals import emit


class TestCreateState:
    """Initial machine state."""

    def test_initial_registers(self, fresh_state):
        assert fresh_state.pc == PROGRAM_START
        assert fresh_state.I == 0
        assert not fresh_state.V.any()
        assert fresh_state.stack.pointer == 0
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert not fresh_state.keypad.any()
        assert not fresh_state.play_audio

    def test_font_loaded(self, fresh_state):
        assert [int(b) for b in fresh_state.memory[:80]] == FONT_DATA
        assert not fresh_state.memory[80:].any()

    def test_display_shape(self, fresh_state):
        assert fresh_state.display.shape == (32, 64)
        assert not fresh_state.display.any()

    def test_quirks_carried(self):
        quirks = Quirks(clip_sprites=True)
        assert create_state(quirks=quirks).quirks == quirks


class TestRomLoading:
    """ROM loading bounds and errors."""

    def test_load_rom_at_program_start(self, fresh_state):
        state = load_rom(fresh_state, bytes([0x12, 0x34, 0x56]))

        assert [int(b) for b in state.memory[0x200:0x203]] == [0x12, 0x34, 0x56]
        assert state.memory[0x203] == 0
        assert state.pc == PROGRAM_START

    def test_load_empty_rom(self, fresh_state):
        state = load_rom(fresh_state, b"")
        assert jnp.array_equal(state.memory, fresh_state.memory)

    def test_load_rom_fills_memory(self, fresh_state):
        rom = bytes(range(256)) * (MAX_ROM_SIZE // 256)
        assert len(rom) == MAX_ROM_SIZE == 3584

        state = load_rom(fresh_state, rom)

        assert state.memory[0xFFF] == 0xFF
        assert state.memory[0x200] == 0x00

    def test_load_rom_too_large(self, fresh_state):
        with pytest.raises(RomTooLarge) as excinfo:
            load_rom(fresh_state, bytes(MAX_ROM_SIZE + 1))

        assert excinfo.value.size == MAX_ROM_SIZE + 1
        assert excinfo.value.limit == MAX_ROM_SIZE

    def test_load_rom_file(self, fresh_state, tmp_path):
        rom_path = tmp_path / "game.ch8"
        rom_path.write_bytes(bytes([0x00, 0xE0, 0x12, 0x00]))

        state = load_rom_file(fresh_state, str(rom_path))

        assert [int(b) for b in state.memory[0x200:0x204]] == [0x00, 0xE0, 0x12, 0x00]

    def test_load_missing_rom_file(self, fresh_state, tmp_path):
        with pytest.raises(RomLoadError):
            load_rom_file(fresh_state, str(tmp_path / "missing.ch8"))


class TestFetchAndStep:
    """Instruction fetch and the step function."""

    def test_fetch_is_big_endian(self, fresh_state):
        state = load_rom(fresh_state, bytes([0xA2, 0x2A]))

        state, instruction = fetch(state)

        assert instruction == 0xA22A
        assert state.pc == 0x202

    def test_step_executes_and_reports(self, fresh_state):
        state = load_rom(fresh_state, bytes([0x60, 0x42]))

        state, signals = step(state)

        assert state.V[0] == 0x42
        assert state.pc == 0x202
        assert int(signals.status) == Status.OK
        assert int(signals.opcode) == 0x6042

    def test_step_past_end_of_memory_halts(self, fresh_state):
        state = fresh_state.replace(pc=jnp.asarray(0x1000, dtype=jnp.uint16))

        new_state, signals = step(state)

        assert int(signals.status) == Status.HALTED
        assert new_state.pc == 0x1000
        assert jnp.array_equal(new_state.V, state.V)

    def test_word_straddling_end_of_memory_halts(self, fresh_state):
        """A half word at 0xFFF is never completed from the font area."""
        state = fresh_state.replace(
            pc=jnp.asarray(0xFFF, dtype=jnp.uint16),
            memory=fresh_state.memory.at[0xFFF].set(0x60),
        )

        new_state, signals = step(state)

        assert int(signals.status) == Status.HALTED
        assert new_state.pc == 0xFFF
        assert new_state.V[0] == 0

    def test_last_word_in_memory_executes(self, fresh_state):
        state = fresh_state.replace(
            pc=jnp.asarray(0xFFE, dtype=jnp.uint16),
            memory=fresh_state.memory.at[0xFFE].set(0x60).at[0xFFF].set(0x2A),
        )

        state, signals = step(state)

        assert int(signals.status) == Status.OK
        assert state.V[0] == 0x2A
        assert state.pc == 0x1000

    def test_jump_beyond_memory_then_halts(self, fresh_state):
        """BNNN with a large V0 leaves memory; the next step halts."""
        state = load_rom(fresh_state, bytes([0x60, 0xFF, 0xBF, 0xFF]))

        state, signals = run_steps(state, 3)

        assert state.pc == 0xFFF + 0xFF
        assert [int(s) for s in signals.status] == [Status.OK, Status.OK, Status.HALTED]

    def test_run_steps_stacks_signals(self, fresh_state):
        # CLS; LD V0, 1; JP 0x202
        state = load_rom(fresh_state, bytes([0x00, 0xE0, 0x60, 0x01, 0x12, 0x02]))

        state, signals = run_steps(state, 5)

        assert signals.status.shape == (5,)
        assert [int(o) for o in signals.opcode] == [0x00E0, 0x6001, 0x1202, 0x6001, 0x1202]
        assert [bool(d) for d in signals.display_dirty] == [True, False, False, False, False]
        assert state.pc == 0x202

    def test_unknown_opcode_does_not_stop(self, fresh_state):
        state = load_rom(fresh_state, bytes([0xE0, 0x00, 0x60, 0x07]))

        state, signals = run_steps(state, 2)

        assert int(signals.status[0]) == Status.UNKNOWN_OPCODE
        assert int(signals.status[1]) == Status.OK
        assert state.V[0] == 7


class TestTimers:
    """The 60Hz timer tick."""

    def test_tick_decrements(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.asarray(5, dtype=jnp.uint8),
            sound_timer=jnp.asarray(3, dtype=jnp.uint8),
        )

        state = tick_timers(state)

        assert state.delay_timer == 4
        assert state.sound_timer == 2
        assert state.play_audio

    def test_tick_floors_at_zero(self, fresh_state):
        state = tick_timers(tick_timers(fresh_state))

        assert state.delay_timer == 0
        assert state.sound_timer == 0
        assert not state.play_audio

    def test_sound_plays_every_tick_while_running(self, fresh_state):
        state = fresh_state.replace(sound_timer=jnp.asarray(2, dtype=jnp.uint8))

        plays = []
        for _ in range(4):
            state = tick_timers(state)
            state, play = consume_audio(state)
            plays.append(play)

        assert plays == [True, True, False, False]

    def test_consume_audio_clears_flag(self, fresh_state):
        state = fresh_state.replace(play_audio=jnp.asarray(True))

        state, play = consume_audio(state)
        assert play is True

        state, play = consume_audio(state)
        assert play is False

    def test_timer_visible_to_program(self, fresh_state):
        # LD V0, 10; LD DT, V0
        state = load_rom(fresh_state, bytes([0x60, 0x0A, 0xF0, 0x15, 0xF1, 0x07]))
        state, _ = run_steps(state, 2)
        for _ in range(3):
            state = tick_timers(state)

        state, _ = step(state)

        assert state.V[1] == 7


class TestInput:
    """Keypad updates and run_frame."""

    def test_set_keypad(self, fresh_state):
        keys = np.zeros(16, dtype=np.bool_)
        keys[[0x1, 0xF]] = True

        state = set_keypad(fresh_state, keys)

        assert [int(k) for k in jnp.nonzero(state.keypad)[0]] == [0x1, 0xF]

    def test_run_frame_waits_then_resumes(self, fresh_state):
        # LD V2, K; JP 0x202
        state = load_rom(fresh_state, bytes([0xF2, 0x0A, 0x12, 0x02]))
        no_keys = np.zeros(16, dtype=np.bool_)

        state, signals = run_frame(state, no_keys, 8)

        assert state.pc == 0x200
        assert bool(signals.key_wait.all())

        keys = no_keys.copy()
        keys[0xA] = True
        state, signals = run_frame(state, keys, 8)

        assert state.V[2] == 0xA
        assert not bool(signals.key_wait[1:].any())

    def test_run_frame_ticks_once(self, fresh_state):
        state = fresh_state.replace(delay_timer=jnp.asarray(10, dtype=jnp.uint8))
        state = load_rom(state, bytes([0x12, 0x00]))  # JP 0x200

        state, signals = run_frame(state, np.zeros(16, dtype=np.bool_), 9)

        assert state.delay_timer == 9
        assert signals.status.shape == (9,)

    def test_run_frame_under_jit_matches_steps(self):
        """Frames built from the same seed produce the same machine."""
        rom = bytes([0xC0, 0xFF, 0xC1, 0xFF, 0x12, 0x00])
        states = []
        for _ in range(2):
            state = load_rom(create_state(jax.random.PRNGKey(7)), rom)
            state, _ = run_frame(state, np.zeros(16, dtype=np.bool_), 9)
            states.append(state)
        assert jnp.array_equal(states[0].V, states[1].V)


class TestRaiseForStatus:
    """Host-side conversion of signals to exceptions."""

    @pytest.mark.parametrize("status, error", [
        (Status.UNKNOWN_OPCODE, UnknownOpcode),
        (Status.STACK_OVERFLOW, StackOverflow),
        (Status.STACK_UNDERFLOW, StackUnderflow),
    ])
    def test_anomalies_raise(self, status, error):
        with pytest.raises(error):
            raise_for_status(emit(status))

    @pytest.mark.parametrize("status", [Status.OK, Status.HALTED])
    def test_normal_statuses_pass(self, status):
        raise_for_status(emit(status))

    def test_stacked_signals(self, fresh_state):
        state = load_rom(fresh_state, bytes([0x00, 0xEE]))  # RET with empty stack
        _, signals = run_steps(state, 1)

        with pytest.raises(StackUnderflow, match="0x00EE"):
            raise_for_status(signals)


@pytest.mark.parametrize("status", list(Status))
def test_emit_encodes_status_as_byte(status):
    signals = emit(status)

    assert signals.status.dtype == jnp.uint8
    assert int(signals.status) == int(status)
