"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.signals import StepSignals, emit
from chipjax.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, ADDRESS_MASK, FLAG_REGISTER,
)

# Sprite-local coordinate grids: one row per possible sprite byte, eight columns
rows = jnp.arange(MAX_SPRITE_HEIGHT + 1)[:, None]
cols = jnp.arange(SPRITE_WIDTH)[None, :]


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, StepSignals]:
    """DXYN - XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    The origin wraps to the screen; rows and columns running past the right or
    bottom edge wrap back to 0 unless the ``clip_sprites`` quirk is set. VF is 1
    when any lit pixel was switched off.
    """
    sprite_x = jnp.astype(state.V[instruction.x] % SCREEN_WIDTH, jnp.int32)
    sprite_y = jnp.astype(state.V[instruction.y] % SCREEN_HEIGHT, jnp.int32)

    addresses = (jnp.astype(state.I, jnp.int32) + rows) & ADDRESS_MASK
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    bits = (sprite_bytes >> (7 - cols)) & 1
    bits = bits * (rows < instruction.n)

    xx = sprite_x + cols
    yy = sprite_y + rows
    if state.quirks.clip_sprites:
        bits = bits * ((xx < SCREEN_WIDTH) & (yy < SCREEN_HEIGHT))

    sprite = jnp.zeros_like(state.display).at[yy % SCREEN_HEIGHT, xx % SCREEN_WIDTH].add(
        jnp.astype(bits, jnp.uint8)
    )
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    ), emit(display_dirty=True)
