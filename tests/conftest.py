"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipjax import create_state, execute, Quirks


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def shift_vx_state():
    """State whose shifts operate on VX in place."""
    return create_state(quirks=Quirks(shift_uses_vy=False))


@pytest.fixture
def clipping_state():
    """State that clips sprites at the screen edge."""
    return create_state(quirks=Quirks(clip_sprites=True))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def run(state, *instructions):
    """Execute instructions in order, discarding signals."""
    for instruction in instructions:
        state, _ = execute(state, instruction)
    return state
