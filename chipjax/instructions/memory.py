"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import StepSignals, emit


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8))), emit()


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """7XNN - Add NN to VX, wrapping mod 256; VF untouched."""
    return state.replace(V=state.V.at[instruction.x].add(jnp.astype(instruction.nn, jnp.uint8))), emit()


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16)), emit()


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jnp.astype(jax.random.randint(subkey, shape=(), minval=0, maxval=256), jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(random_value & jnp.astype(instruction.nn, jnp.uint8)), rng=key), emit()
