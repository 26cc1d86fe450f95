"""CHIP-8 return-stack operations.

Push stores at the current depth then increments; pop decrements then loads.
Both are guarded: a push onto a full stack or a pop from an empty one leaves
the stack untouched and reports ``ok=False``.
"""

import jax.numpy as jnp
from chipjax.constants import STACK_SIZE
from chipjax.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack."""
    ok = stack.pointer < STACK_SIZE
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    new_data = jnp.where(ok, stack.data.at[slot].set(address), stack.data)
    new_pointer = jnp.where(ok, stack.pointer + 1, stack.pointer)
    return stack.replace(data=new_data, pointer=new_pointer), ok


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack."""
    ok = stack.pointer > 0
    new_pointer = jnp.where(ok, stack.pointer - 1, stack.pointer)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(jnp.where(ok, 0, popped_address))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, ok
