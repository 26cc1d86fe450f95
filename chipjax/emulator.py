"""Main CHIP-8 execution engine.

The interpreter is a pure function of ``(state, instruction)``: it returns a new
``EmulatorState`` together with the ``StepSignals`` describing what happened.
Nothing here raises for a misbehaving program; only ROM loading can fail.
"""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from chipjax.state import EmulatorState
from chipjax.decode import decode
from chipjax.constants import PROGRAM_START, MEMORY_SIZE, MAX_ROM_SIZE, NUM_KEYS
from chipjax.signals import Status, StepSignals, RomLoadError, RomTooLarge, emit
from chipjax.instructions.system import execute_system_instruction
from chipjax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_jump_with_register_offset, execute_skip_if_key
)
from chipjax.instructions.alu import execute_alu_operation
from chipjax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipjax.instructions.display import execute_display
from chipjax.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> tuple[EmulatorState, StepSignals]:
    """Execute single CHIP-8 instruction (pc must already point past it)."""
    decoded_instruction = decode(instruction)

    state, signals = jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_register_offset if state.quirks.jump_uses_vx else execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )
    return state, signals.replace(opcode=jnp.astype(instruction, jnp.uint16))


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch the big-endian word at pc and advance pc by 2."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def step(state: EmulatorState) -> tuple[EmulatorState, StepSignals]:
    """Fetch, decode and execute one instruction.

    A pc whose two-byte word does not fit in memory means the program ran
    off the end: the step does nothing and reports HALTED.
    """
    def _halted(state):
        return state, emit(Status.HALTED)

    def _run(state):
        state, instruction = fetch(state)
        return execute(state, instruction)

    return jax.lax.cond(state.pc > MEMORY_SIZE - 2, _halted, _run, state)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """60Hz timer tick: count both timers down to 0, raising play_audio while sound runs."""
    sounding = state.sound_timer > 0
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(sounding, state.sound_timer - 1, state.sound_timer),
        play_audio=state.play_audio | sounding,
    )


def set_keypad(state: EmulatorState, keys) -> EmulatorState:
    """Replace the 16 key states with a fresh sample from the input source."""
    return state.replace(keypad=jnp.asarray(keys, dtype=jnp.bool_).reshape(NUM_KEYS))


def consume_audio(state: EmulatorState) -> tuple[EmulatorState, bool]:
    """Read and clear the one-shot play_audio flag."""
    play = bool(state.play_audio)
    return state.replace(play_audio=jnp.zeros((), dtype=jnp.bool_)), play


def _scan_step(state, _):
    return step(state)


@partial(jax.jit, static_argnums=1)
def run_steps(state: EmulatorState, n: int) -> tuple[EmulatorState, StepSignals]:
    """Run ``n`` steps; signals come back stacked along a leading axis of length n."""
    return jax.lax.scan(_scan_step, state, length=n)


@partial(jax.jit, static_argnums=2)
def run_frame(state: EmulatorState, keypad: jnp.ndarray, n: int) -> tuple[EmulatorState, StepSignals]:
    """One driver iteration: sample keys, run ``n`` steps, then tick the timers once."""
    state = set_keypad(state, keypad)
    state, signals = jax.lax.scan(_scan_step, state, length=n)
    return tick_timers(state), signals


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(len(rom_data), MAX_ROM_SIZE)
    rom_array = jnp.asarray(np.frombuffer(bytes(rom_data), dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Read a ROM file and load it at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"cannot read ROM {filename!r}: {e.strerror or e}") from e
    return load_rom(state, rom_data)
