"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import StepSignals, emit
from chipjax.constants import FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, NUM_REGISTERS, INDEX_MASK
from chipjax.instructions.system import unknown_opcode


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer)), emit()


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x]), emit()


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x]), emit()


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX1E - Add VX to I register; VF untouched."""
    new_i = (jnp.astype(state.I, jnp.int32) + state.V[instruction.x]) & INDEX_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16)), emit()


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX0A - Wait for key press.

    Polls the keypad once. With no key down, pc is rewound onto this instruction
    so the next step polls again, and ``key_wait`` is raised; control always
    returns to the driver.
    """
    any_pressed = jnp.any(state.keypad)
    pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
    new_V = jnp.where(any_pressed, state.V.at[instruction.x].set(pressed_key), state.V)
    new_pc = jnp.where(any_pressed, state.pc, state.pc - 2)
    return state.replace(V=new_V, pc=new_pc), emit(key_wait=jnp.logical_not(any_pressed))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16)), emit()


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.arange(3) + state.I) & ADDRESS_MASK
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory), emit()


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    if state.quirks.memory_increments_index:
        return jnp.astype((jnp.astype(state.I, jnp.int32) + instruction.x + 1) & INDEX_MASK, jnp.uint16)
    return state.I


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = (state.I + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values)
    return state.replace(memory=new_memory, I=_advance_index(state, instruction)), emit()


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = (state.I + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction)), emit()


_MISC_HANDLERS = [
    (0x07, execute_get_delay_timer),
    (0x0A, execute_wait_for_key),
    (0x15, execute_set_delay_timer),
    (0x18, execute_set_sound_timer),
    (0x1E, execute_add_to_index),
    (0x29, execute_font_character),
    (0x33, execute_bcd_conversion),
    (0x55, execute_store_registers),
    (0x65, execute_load_registers),
]

# Low byte -> branch index; every unlisted byte maps to the trailing unknown handler
_MISC_TABLE = jnp.full(256, len(_MISC_HANDLERS), dtype=jnp.int32).at[
    jnp.array([code for code, _ in _MISC_HANDLERS])
].set(jnp.arange(len(_MISC_HANDLERS), dtype=jnp.int32))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """Dispatch misc instructions on the low byte."""
    return jax.lax.switch(
        _MISC_TABLE[instruction.nn],
        [handler for _, handler in _MISC_HANDLERS] + [unknown_opcode],
        state, instruction
    )
