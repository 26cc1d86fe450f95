"""CHIP-8 machine state structures."""

import dataclasses

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipjax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)


@dataclasses.dataclass(frozen=True)
class Quirks:
    """Behavioural switches where CHIP-8 implementations disagree.

    Attributes:
        shift_uses_vy: 8XY6/8XYE shift VY and store the result in VX (COSMAC VIP).
            When False, VX is shifted in place and VY is ignored.
        jump_uses_vx: BNNN is read as BXNN and jumps to XNN + VX instead of NNN + V0.
        memory_increments_index: FX55/FX65 leave I pointing past the last register.
        clip_sprites: DXYN clips sprites at the screen edge instead of wrapping them.
    """
    shift_uses_vy: bool = True
    jump_uses_vx: bool = False
    memory_increments_index: bool = False
    clip_sprites: bool = False


@dataclass(frozen=True)
class StackState:
    """Return-address stack; pointer is the current depth."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Complete addressable state of the CHIP-8 virtual machine."""
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    # Row-major: display[y, x], flat index y * 64 + x
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.uint8))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    play_audio: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    quirks: Quirks = field(pytree_node=False, default=Quirks())


def create_state(rng: jax.Array = jax.random.PRNGKey(0), quirks: Quirks = Quirks()) -> EmulatorState:
    """Create initial machine state with the font table loaded and pc at 0x200."""
    state = EmulatorState(rng, quirks=quirks)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))
